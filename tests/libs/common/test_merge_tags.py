"""Tests for merge-tag substitution in email templates."""

from common.utils.template_substitution import DEFAULT_LOGIN_URL, MERGE_TAGS, MergeData, apply_merge_tags


class TestApplyMergeTags:
    """Substitution, fallbacks and untouched text."""

    def test_known_tags_are_replaced(self) -> None:
        result = apply_merge_tags(
            "Hi {{name}}, welcome to {{course_name}}!", MergeData(name="Jo", course_name="Capacity 101")
        )

        assert result == "Hi Jo, welcome to Capacity 101!"

    def test_missing_values_use_fallbacks(self) -> None:
        result = apply_merge_tags("Hi {{name}}, {{cohort_name}} starts {{start_date}}.", MergeData())

        assert result == "Hi there, your cohort starts TBD."

    def test_empty_string_counts_as_missing(self) -> None:
        assert apply_merge_tags("Hi {{name}}", MergeData(name="")) == "Hi there"

    def test_every_occurrence_is_replaced(self) -> None:
        assert apply_merge_tags("{{name}} / {{name}}", {"name": "Jo"}) == "Jo / Jo"

    def test_unknown_and_malformed_tags_are_left_alone(self) -> None:
        template = "{{unknown}} {{ name }} {{Name}} {name}"

        assert apply_merge_tags(template, MergeData(name="Jo")) == template

    def test_login_url_prefers_data_then_argument_then_default(self) -> None:
        assert apply_merge_tags("{{login_url}}", MergeData(login_url="https://a.test/login")) == "https://a.test/login"
        assert apply_merge_tags("{{login_url}}", MergeData(), login_url="https://b.test/login") == "https://b.test/login"
        assert apply_merge_tags("{{login_url}}", MergeData()) == DEFAULT_LOGIN_URL

    def test_empty_template_is_returned_unchanged(self) -> None:
        assert apply_merge_tags("", MergeData(name="Jo")) == ""

    def test_dict_data_ignores_extra_keys(self) -> None:
        assert apply_merge_tags("{{email}}", {"email": "jo@example.com", "other": 1}) == "jo@example.com"


class TestMergeTagCatalog:
    def test_catalog_exposes_tag_syntax(self) -> None:
        assert MERGE_TAGS["name"].tag == "{{name}}"
        assert all(tag.tag == f"{{{{{key}}}}}" for key, tag in MERGE_TAGS.items())

    def test_fallback_not_serialized(self) -> None:
        assert "fallback" not in MERGE_TAGS["name"].model_dump()
