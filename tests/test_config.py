"""
Tests for feature and strip option file loading
"""
import json

import pytest

from feature_switch.config import load_features, load_strip_options
from feature_switch.errors import ErrorCode, FeatureSwitchError
from feature_switch.flags import FeatureStore


class TestLoadFeatures:
    """Test suite for load_features"""

    def test_bare_mapping(self, tmp_path):
        path = tmp_path / "features.yaml"
        path.write_text("search: true\nexport: 'false'\n")

        assert load_features(path) == {"search": True, "export": "false"}

    def test_features_section(self, tmp_path):
        path = tmp_path / "features.yaml"
        path.write_text(
            "features:\n"
            "  new-dashboard: true\n"
            "  legacy-export: false\n"
            "owner: platform\n"
        )

        assert load_features(str(path)) == {"new-dashboard": True, "legacy-export": False}

    def test_json_file(self, tmp_path):
        path = tmp_path / "features.json"
        path.write_text(json.dumps({"features": {"a": True, "b": "true"}}))

        assert load_features(path) == {"a": True, "b": "true"}

    def test_keys_are_strings(self, tmp_path):
        path = tmp_path / "features.yaml"
        path.write_text("1: true\n")

        assert load_features(path) == {"1": True}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "features.yaml"
        path.write_text("")

        assert load_features(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FeatureSwitchError) as exc_info:
            load_features(tmp_path / "missing.yaml")

        assert exc_info.value.code == ErrorCode.CONFIG_NOT_FOUND
        assert exc_info.value.details["path"].endswith("missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "features.yaml"
        path.write_text("features: [unclosed\n")

        with pytest.raises(FeatureSwitchError) as exc_info:
            load_features(path)

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID

    @pytest.mark.parametrize("content", ["- a\n- b\n", "just a string\n", "features: [a, b]\n"])
    def test_non_mapping_content(self, tmp_path, content):
        path = tmp_path / "features.yaml"
        path.write_text(content)

        with pytest.raises(FeatureSwitchError) as exc_info:
            load_features(path)

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID
        assert exc_info.value.to_dict()["error_code"] == "CONFIG_INVALID"


class TestLoadStripOptions:
    """Test suite for load_strip_options"""

    def test_merges_onto_defaults(self, tmp_path):
        path = tmp_path / "strip.yaml"
        path.write_text(
            "strip:\n"
            "  slash_comments:\n"
            "    replace: '// removed: ${FEATURE}'\n"
            "  html_attributes:\n"
            "    enabled: false\n"
        )

        options = load_strip_options(path)

        assert options["slash_comments"] == {"enabled": True, "replace": "// removed: ${FEATURE}"}
        assert options["html_attributes"]["enabled"] is False
        assert options["star_comments"]["replace"] == "/* Feature [${FEATURE}] DISABLED */"

    def test_bare_mapping(self, tmp_path):
        path = tmp_path / "strip.yaml"
        path.write_text("star_comments:\n  enabled: false\n")

        assert load_strip_options(path)["star_comments"]["enabled"] is False

    def test_boolean_dialect(self, tmp_path):
        path = tmp_path / "strip.yaml"
        path.write_text("strip:\n  html_comments: false\n")

        options = load_strip_options(path)

        assert options["html_comments"] == {
            "enabled": False,
            "replace": "<!-- Feature [${FEATURE}] DISABLED -->",
        }

    @pytest.mark.parametrize("value", ["3", "'off'", "", "[a, b]"])
    def test_invalid_dialect_settings(self, tmp_path, value):
        path = tmp_path / "strip.yaml"
        path.write_text(f"strip:\n  html_comments: {value}\n")

        with pytest.raises(FeatureSwitchError) as exc_info:
            load_strip_options(path)

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID
        assert "html_comments" in exc_info.value.message

    def test_missing_file(self, tmp_path):
        with pytest.raises(FeatureSwitchError) as exc_info:
            load_strip_options(tmp_path / "strip.yaml")

        assert exc_info.value.code == ErrorCode.CONFIG_NOT_FOUND


class TestFeatureStoreFromFile:
    """Test suite for FeatureStore.from_file"""

    def test_values_normalized(self, tmp_path):
        path = tmp_path / "features.yaml"
        path.write_text("features:\n  a: 'TRUE'\n  b: 'false'\n  c: 1\n")

        store = FeatureStore.from_file(path)

        assert store.get_features() == {"a": True, "b": False, "c": False}

    def test_context_applied(self, tmp_path):
        path = tmp_path / "features.yaml"
        path.write_text("a: true\n")

        store = FeatureStore.from_file(path, {"can_set": lambda name, value: False})
        store.disable("a")

        assert store.is_enabled("a") is True
