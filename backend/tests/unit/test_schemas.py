"""
Unit tests for request schemas.
"""

import pytest
from pydantic import ValidationError

from prompt_manager.modules.categories.schemas import CategoryCreate, CategoryUpdate
from prompt_manager.modules.prompts.schemas import (
    MAX_TAGS_PER_PROMPT,
    PromptCreate,
    PromptListItem,
    PromptUpdate,
    RatingUpdate,
)
from prompt_manager.modules.tags.schemas import TagCreate


class TestPromptCreate:
    """Tests for PromptCreate validation."""

    def test_accepts_camel_case(self):
        data = PromptCreate.model_validate(
            {'title': 'T', 'content': 'C', 'categoryId': 2, 'priority': 5}
        )
        assert data.category_id == 2
        assert data.priority == 5

    def test_defaults(self):
        data = PromptCreate(title='T', content='C')
        assert data.tags == []
        assert data.priority == 0
        assert data.category_id is None

    def test_title_is_trimmed(self):
        assert PromptCreate(title='  Titulo  ', content='C').title == 'Titulo'

    @pytest.mark.parametrize('field', ['title', 'content'])
    def test_blank_required_fields(self, field):
        payload = {'title': 'T', 'content': 'C', field: '   '}
        with pytest.raises(ValidationError):
            PromptCreate(**payload)

    @pytest.mark.parametrize('priority', [-1, 11])
    def test_priority_bounds(self, priority):
        with pytest.raises(ValidationError):
            PromptCreate(title='T', content='C', priority=priority)

    def test_tags_deduplicated_in_order(self):
        data = PromptCreate(title='T', content='C', tags=['b', ' a ', 'b'])
        assert data.tags == ['b', 'a']

    def test_empty_tag_rejected(self):
        with pytest.raises(ValidationError):
            PromptCreate(title='T', content='C', tags=['ok', '  '])

    def test_long_tag_rejected(self):
        with pytest.raises(ValidationError):
            PromptCreate(title='T', content='C', tags=['x' * 51])

    def test_too_many_tags(self):
        tags = [f'tag{i}' for i in range(MAX_TAGS_PER_PROMPT + 1)]
        with pytest.raises(ValidationError):
            PromptCreate(title='T', content='C', tags=tags)


class TestPromptUpdate:
    """Tests for partial update payloads."""

    def test_only_sent_fields_are_set(self):
        data = PromptUpdate.model_validate({'title': 'Novo'})
        assert data.model_dump(exclude_unset=True) == {'title': 'Novo'}

    def test_explicit_null_category_is_kept(self):
        data = PromptUpdate.model_validate({'categoryId': None})
        assert data.model_dump(exclude_unset=True) == {'category_id': None}


class TestRatingUpdate:
    """Tests for rating bounds."""

    @pytest.mark.parametrize('rating', [0, 2.5, 5])
    def test_inclusive_bounds(self, rating):
        assert RatingUpdate(rating=rating).rating == rating

    @pytest.mark.parametrize('rating', [-0.1, 5.1, 7])
    def test_out_of_range(self, rating):
        with pytest.raises(ValidationError):
            RatingUpdate(rating=rating)


class TestCategoryAndTagSchemas:
    """Tests for category and tag payloads."""

    def test_category_default_color(self):
        assert CategoryCreate(name='Vendas').color == '#1890ff'

    def test_tag_default_color(self):
        assert TagCreate(name='email').color == '#87d068'

    @pytest.mark.parametrize('color', ['red', '#12345', '#GGGGGG', '1890ff'])
    def test_invalid_color(self, color):
        with pytest.raises(ValidationError):
            CategoryCreate(name='Vendas', color=color)

    def test_name_trimmed_and_control_chars_removed(self):
        assert CategoryCreate(name='  Vendas\x07 Diretas ').name == 'Vendas Diretas'

    def test_name_keeps_punctuation(self):
        assert CategoryCreate(name="O'Reilly").name == "O'Reilly"
        assert TagCreate(name=" it's ").name == "it's"

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            CategoryCreate(name='   ')

    def test_update_all_optional(self):
        assert CategoryUpdate().model_dump(exclude_unset=True) == {}


class TestPromptListItem:
    """Tests for list item counters."""

    def test_missing_counts_become_zero(self):
        item = PromptListItem.model_validate({
            'id': 1,
            'title': 'T',
            'content': 'C',
            'priority': 0,
            'useCount': 0,
            'rating': 0,
            'isFavorite': False,
            'createdAt': '2026-01-01T00:00:00Z',
            'updatedAt': '2026-01-01T00:00:00Z',
            'usageCount': None,
            'versionCount': None,
        })
        assert item.usage_count == 0
        assert item.version_count == 0
