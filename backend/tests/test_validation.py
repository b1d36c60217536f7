"""Rule-list validation: every failure is collected, strings are trimmed."""

import pytest

from blog_api.exceptions import ValidationError
from blog_api.validation import (
    create_post_rules,
    login_rules,
    register_rules,
    update_post_rules,
)


def messages(rules, payload):
    with pytest.raises(ValidationError) as exc:
        rules.validate(payload)
    return [e["message"] for e in exc.value.errors]


class TestRegisterRules:
    def test_valid_payload_is_trimmed(self):
        clean = register_rules.validate(
            {"name": "  Ada ", "email": " ada@example.com ", "password": " secret1 "}
        )
        assert clean == {"name": "Ada", "email": "ada@example.com", "password": "secret1"}

    def test_empty_payload_reports_everything(self):
        assert messages(register_rules, {}) == [
            "Name is required",
            "Email is required",
            "Please provide a valid email",
            "Password is required",
            "Password must be at least 6 characters",
        ]

    def test_whitespace_only_name_is_empty(self):
        result = messages(register_rules, {"name": "   ", "email": "a@b.co", "password": "secret1"})
        assert result == ["Name is required"]

    def test_short_password_and_bad_email(self):
        result = messages(register_rules, {"name": "Ada", "email": "nope", "password": "123"})
        assert result == ["Please provide a valid email", "Password must be at least 6 characters"]

    def test_error_message_joins_failures(self):
        with pytest.raises(ValidationError) as exc:
            register_rules.validate({"name": "", "email": "a@b.co", "password": "secret1"})
        assert exc.value.message == "Name is required"
        assert exc.value.errors == [{"field": "name", "message": "Name is required"}]


def test_login_rules():
    assert messages(login_rules, {"email": "x@example.com"}) == ["Password is required"]


class TestPostRules:
    def test_create_requires_title_and_content(self):
        assert messages(create_post_rules, {"title": " ", "content": ""}) == [
            "Title is required",
            "Content is required",
        ]

    def test_create_rejects_bad_status_and_tags(self):
        result = messages(
            create_post_rules,
            {"title": "T", "content": "C", "status": "archived", "tags": "python"},
        )
        assert result == ["Status must be either draft or published", "Tags must be an array"]

    def test_update_allows_missing_fields(self):
        assert update_post_rules.validate({"title": None, "content": None}) == {
            "title": None,
            "content": None,
        }

    def test_update_rejects_empty_strings(self):
        assert messages(update_post_rules, {"title": "  ", "content": ""}) == [
            "Title cannot be empty",
            "Content cannot be empty",
        ]

    @pytest.mark.parametrize("rules", [create_post_rules, update_post_rules])
    def test_tags_must_all_be_strings(self, rules):
        result = messages(rules, {"title": "T", "content": "C", "tags": ["ok", {"x": 1}, None]})
        assert result == ["Each tag must be a string"]
