"""Tests for task-type prompt formatting."""

import pytest

from vectorhub.models.embedding import TaskType
from vectorhub.providers.task_types import (
    BASIC_TASK_TYPES,
    format_text_with_task_type,
    is_task_type_supported,
    supported_task_types,
)


class TestFormatTextWithTaskType:
    @pytest.mark.parametrize(
        "task_type, expected",
        [
            (TaskType.RETRIEVAL_QUERY, "task: search result | query: how to bake"),
            (TaskType.QUESTION_ANSWERING, "task: question answering | query: how to bake"),
            (TaskType.CODE_RETRIEVAL, "task: code retrieval | query: how to bake"),
            (TaskType.RETRIEVAL_DOCUMENT, "title: none | text: how to bake"),
        ],
    )
    def test_embeddinggemma_prompts(self, task_type, expected):
        assert format_text_with_task_type("embeddinggemma", "how to bake", task_type) == expected

    def test_document_title_and_version_tag(self):
        formatted = format_text_with_task_type(
            "embeddinggemma:latest", "bread", TaskType.RETRIEVAL_DOCUMENT, title="Recipes"
        )

        assert formatted == "title: Recipes | text: bread"

    @pytest.mark.parametrize("model_name", ["nomic-embed-text", "text-embedding-3-small", "unknown"])
    def test_models_without_prompts_unchanged(self, model_name):
        assert format_text_with_task_type(model_name, "bread", TaskType.RETRIEVAL_QUERY) == "bread"


class TestTaskTypeSupport:
    def test_supported_task_types(self):
        assert supported_task_types("embeddinggemma") == list(TaskType)
        assert supported_task_types("nomic-embed-text:v1.5") == BASIC_TASK_TYPES
        assert supported_task_types("anything-else") == BASIC_TASK_TYPES

    def test_is_task_type_supported(self):
        assert is_task_type_supported("embeddinggemma", TaskType.CLUSTERING)
        assert not is_task_type_supported("nomic-embed-text", TaskType.CLUSTERING)
        assert is_task_type_supported("unknown", TaskType.RETRIEVAL_DOCUMENT)
