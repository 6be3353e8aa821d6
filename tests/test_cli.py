"""
Tests for the feature-switch command line
"""
import json

import pytest

from feature_switch.cli import EXIT_CONFIG_ERROR, EXIT_OK, build_parser, main

SOURCE = (
    "start\n"
    "// FEATURE.start(beta)\n"
    "beta();\n"
    "// FEATURE.end(beta)\n"
    "/* FEATURE.start(stable) */stable();/* FEATURE.end(stable) */\n"
    "end\n"
)


@pytest.fixture
def features_file(tmp_path):
    path = tmp_path / "features.yaml"
    path.write_text("features:\n  stable: true\n  beta: 'false'\n")
    return path


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "app.js"
    path.write_text(SOURCE)
    return path


class TestShow:
    """Test suite for the show command"""

    def test_show_table(self, features_file, capsys):
        assert main(["show", "--features", str(features_file)]) == EXIT_OK

        out = capsys.readouterr().out.splitlines()
        assert out == ["beta    disabled", "stable  enabled"]

    def test_show_json(self, features_file, capsys):
        assert main(["show", "-f", str(features_file), "--json"]) == EXIT_OK

        assert json.loads(capsys.readouterr().out) == {"beta": False, "stable": True}

    def test_missing_features_file(self, tmp_path, capsys):
        code = main(["show", "--features", str(tmp_path / "missing.yaml")])

        assert code == EXIT_CONFIG_ERROR
        assert "not found" in capsys.readouterr().err


class TestStrip:
    """Test suite for the strip command"""

    def test_strip_to_stdout(self, features_file, source_file, capsys):
        assert main(["strip", "-f", str(features_file), str(source_file)]) == EXIT_OK

        assert capsys.readouterr().out == (
            "start\n"
            "// Feature [beta] DISABLED //\n"
            "/* FEATURE.start(stable) */stable();/* FEATURE.end(stable) */\n"
            "end\n"
        )

    def test_strip_to_file(self, features_file, source_file, tmp_path):
        target = tmp_path / "build" / "app.js"

        code = main(["strip", "-f", str(features_file), "-o", str(target), str(source_file)])

        assert code == EXIT_OK
        assert "beta();" not in target.read_text()
        assert "stable();" in target.read_text()
        # Source is left in place
        assert source_file.read_text() == SOURCE

    def test_strip_many_to_directory(self, features_file, source_file, tmp_path):
        page = tmp_path / "index.html"
        page.write_text('<div feature-name="beta">beta</div><p>keep</p>')
        out_dir = tmp_path / "dist"

        code = main([
            "strip", "-f", str(features_file), "-o", str(out_dir),
            str(source_file), str(page)
        ])

        assert code == EXIT_OK
        assert (out_dir / "app.js").exists()
        assert (out_dir / "index.html").read_text() == "<!-- Feature [beta] DISABLED --><p>keep</p>"

    def test_disable_dialect(self, features_file, source_file, capsys):
        code = main([
            "strip", "-f", str(features_file),
            "--disable", "slash_comments", str(source_file)
        ])

        assert code == EXIT_OK
        assert capsys.readouterr().out == SOURCE

    def test_options_file(self, features_file, source_file, tmp_path, capsys):
        options = tmp_path / "strip.yaml"
        options.write_text("strip:\n  slash_comments:\n    replace: '// no ${FEATURE}'\n")

        code = main(["strip", "-f", str(features_file), "--options", str(options), str(source_file)])

        assert code == EXIT_OK
        assert "// no beta\n" in capsys.readouterr().out

    def test_invalid_options_file(self, features_file, source_file, tmp_path, capsys):
        options = tmp_path / "strip.yaml"
        options.write_text("strip:\n  slash_comments: 'off'\n")

        code = main(["strip", "-f", str(features_file), "--options", str(options), str(source_file)])

        assert code == EXIT_CONFIG_ERROR
        assert "slash_comments" in capsys.readouterr().err

    def test_boolean_dialect_in_options_file(self, features_file, source_file, tmp_path, capsys):
        options = tmp_path / "strip.yaml"
        options.write_text("slash_comments: false\n")

        code = main(["strip", "-f", str(features_file), "--options", str(options), str(source_file)])

        assert code == EXIT_OK
        assert capsys.readouterr().out == SOURCE

    def test_missing_source(self, features_file, tmp_path, capsys):
        code = main(["strip", "-f", str(features_file), str(tmp_path / "nope.js")])

        assert code == EXIT_CONFIG_ERROR
        assert "nope.js" in capsys.readouterr().err

    def test_invalid_features_file(self, source_file, tmp_path):
        bad = tmp_path / "features.yaml"
        bad.write_text("- not\n- a mapping\n")

        assert main(["strip", "-f", str(bad), str(source_file)]) == EXIT_CONFIG_ERROR


class TestParser:
    """Test suite for argument parsing"""

    def test_unknown_dialect_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["strip", "-f", "f.yaml", "--disable", "bogus", "a.js"])

    def test_features_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["strip", "a.js"])

    def test_no_command_prints_help(self, capsys):
        assert main([]) == EXIT_OK
        assert "feature-switch" in capsys.readouterr().out
