"""Task-type prompt formats for instruction-tuned embedding models."""

from typing import Dict, List, Optional

from ..models.embedding import TaskType
from .base import normalize_model_name

BASIC_TASK_TYPES = [TaskType.RETRIEVAL_QUERY, TaskType.RETRIEVAL_DOCUMENT]

# Task types each model is known to handle; unlisted models get BASIC_TASK_TYPES
MODEL_TASK_SUPPORT: Dict[str, List[TaskType]] = {
    "embeddinggemma": list(TaskType),
    "nomic-embed-text": BASIC_TASK_TYPES,
}

EMBEDDINGGEMMA_PROMPTS: Dict[TaskType, str] = {
    TaskType.RETRIEVAL_QUERY: "task: search result | query: {text}",
    TaskType.RETRIEVAL_DOCUMENT: "title: {title} | text: {text}",
    TaskType.QUESTION_ANSWERING: "task: question answering | query: {text}",
    TaskType.FACT_VERIFICATION: "task: fact checking | query: {text}",
    TaskType.CLASSIFICATION: "task: classification | query: {text}",
    TaskType.CLUSTERING: "task: clustering | query: {text}",
    TaskType.SEMANTIC_SIMILARITY: "task: sentence similarity | query: {text}",
    TaskType.CODE_RETRIEVAL: "task: code retrieval | query: {text}",
}

# Only models listed here rewrite their input
TASK_PROMPTS: Dict[str, Dict[TaskType, str]] = {
    "embeddinggemma": EMBEDDINGGEMMA_PROMPTS,
}


def supported_task_types(model_name: str) -> List[TaskType]:
    """Task types a model handles, matched without its version tag."""
    return list(MODEL_TASK_SUPPORT.get(normalize_model_name(model_name), BASIC_TASK_TYPES))


def is_task_type_supported(model_name: str, task_type: TaskType) -> bool:
    return task_type in supported_task_types(model_name)


def format_text_with_task_type(
    model_name: str,
    text: str,
    task_type: TaskType,
    title: Optional[str] = None,
) -> str:
    """Wrap ``text`` in the model's prompt for ``task_type``.

    Models without task prompts, and task types a model does not support,
    get the text back unchanged.
    """
    model = normalize_model_name(model_name)
    prompts = TASK_PROMPTS.get(model)
    if not prompts or not is_task_type_supported(model, task_type):
        return text

    return prompts[task_type].format(text=text, title=title or "none")
