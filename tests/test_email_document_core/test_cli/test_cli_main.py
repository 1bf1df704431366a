"""Tests for the email-doc command-line interface."""

import io
import json
import logging
import sys

import pytest

from email_document_core import __version__
from email_document_core.blocks import find_starter
from email_document_core.cli.main import _parse_variables, create_argument_parser, main
from email_document_core.model import ConditionalRule, ConditionOperator, create_default_document
from email_document_core.serializer import (
    EDITOR_DISCRIMINATOR,
    design_json_dumps,
    document_to_markup,
)


@pytest.fixture
def design_file(tmp_path):
    document = create_default_document()
    text = document.body.children[0].children[0].children[0]
    text.html_content = "<p>Pro perks</p>"
    text.condition = ConditionalRule("plan", ConditionOperator.EQUALS, "pro")
    path = tmp_path / "design.json"
    path.write_text(design_json_dumps(document), encoding="utf-8")
    return path


class TestArgumentParser:
    """Test argument parsing."""

    def test_version(self, capsys):
        """Test --version prints the package version."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_no_command(self, capsys):
        """Test running without a command prints help and fails."""
        assert main([]) == 1
        assert "email-doc" in capsys.readouterr().out

    def test_presets(self):
        """Test every preset is accepted."""
        parser = create_argument_parser()

        for preset in ("default", "interactive", "strict_recovery"):
            assert parser.parse_args(["--preset", preset, "starters"]).preset == preset

    @pytest.mark.parametrize("flag,level", [("--verbose", logging.DEBUG), ("-q", logging.ERROR)])
    def test_verbosity_configures_logging(self, monkeypatch, capsys, flag, level):
        """Test verbosity flags install the package log handler at the right level."""
        calls = []
        monkeypatch.setattr(sys.modules["email_document_core.cli.main"], "configure_logging", calls.append)

        assert main([flag, "starters"]) == 0
        assert calls == [level]

    def test_parse_variables(self):
        """Test NAME=VALUE pairs and malformed input."""
        assert _parse_variables(["plan=pro", "name = a=b"]) == {"plan": "pro", "name": " a=b"}
        with pytest.raises(ValueError):
            _parse_variables(["plan"])


class TestToMarkup:
    """Test the to-markup command."""

    def test_renders_markup(self, design_file, capsys):
        """Test design JSON becomes MJML on stdout."""
        assert main(["to-markup", str(design_file)]) == 0

        out = capsys.readouterr().out
        assert out.startswith("<mjml>")
        assert "Pro perks" in out

    def test_variables_filter_conditions(self, design_file, capsys):
        """Test merge-tag values exclude failing conditional content."""
        assert main(["to-markup", str(design_file), "--var", "plan=free"]) == 0

        assert "Pro perks" not in capsys.readouterr().out

    def test_esp_merge_tags(self, tmp_path, capsys):
        """Test --esp rewrites merge tags and omits editor ids."""
        document = create_default_document()
        document.body.children[0].children[0].children[0].html_content = "<p>Hi {{first_name}}</p>"
        path = tmp_path / "design.json"
        path.write_text(design_json_dumps(document), encoding="utf-8")

        assert main(["to-markup", str(path), "--esp", "mailchimp"]) == 0

        out = capsys.readouterr().out
        assert "<p>Hi *|FNAME|*</p>" in out
        assert "ebb-node-" not in out

    def test_output_file(self, design_file, tmp_path):
        """Test the result can be written to a file."""
        output = tmp_path / "out.mjml"

        assert main(["to-markup", str(design_file), "-o", str(output)]) == 0
        assert output.read_text(encoding="utf-8").startswith("<mjml>")

    def test_invalid_input(self, tmp_path, capsys):
        """Test a non-editor file is reported as an error."""
        path = tmp_path / "legacy.json"
        path.write_text('{"body": {"rows": []}}', encoding="utf-8")

        assert main(["to-markup", str(path)]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        """Test a missing input file is reported as an error."""
        assert main(["to-markup", str(tmp_path / "nope.json")]) == 1
        assert "Error:" in capsys.readouterr().err


class TestFromMarkup:
    """Test the from-markup command."""

    def test_parses_markup(self, tmp_path, capsys):
        """Test MJML becomes a design JSON envelope."""
        path = tmp_path / "email.mjml"
        path.write_text(document_to_markup(find_starter("welcome").create()), encoding="utf-8")

        assert main(["from-markup", str(path)]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["_editor"] == EDITOR_DISCRIMINATOR
        assert data["document"]["body"]["children"][0]["type"] == "mj-hero"

    def test_diagnostics_reported(self, tmp_path, capsys):
        """Test coercions are listed on stderr."""
        path = tmp_path / "messy.mjml"
        path.write_text("<mjml><mj-body>loose text</mj-body></mjml>", encoding="utf-8")

        assert main(["from-markup", str(path), "--diagnostics"]) == 0

        err = capsys.readouterr().err
        assert "WARNING: Stray text wrapped in mj-text" in err
        assert "coercions applied" in err

    def test_stdin(self, monkeypatch, capsys):
        """Test - reads markup from stdin."""
        monkeypatch.setattr("sys.stdin", io.StringIO("<mjml><mj-body></mj-body></mjml>"))

        assert main(["from-markup", "-"]) == 0
        assert json.loads(capsys.readouterr().out)["document"]["body"]["type"] == "mj-body"


class TestRecover:
    """Test the recover command."""

    def test_recovers_fenced_reply(self, tmp_path, capsys):
        """Test a saved model reply is recovered to design JSON."""
        document = find_starter("newsletter").create().to_dict()
        path = tmp_path / "reply.txt"
        path.write_text(f"Here you go:\n```json\n{json.dumps(document)}\n```", encoding="utf-8")

        assert main(["recover", str(path)]) == 0

        captured = capsys.readouterr()
        assert "Recovered via fenced_block" in captured.err
        assert json.loads(captured.out)["_editor"] == EDITOR_DISCRIMINATOR

    def test_mjml_format(self, tmp_path, capsys):
        """Test the recovered document can be printed as MJML."""
        path = tmp_path / "reply.txt"
        path.write_text(json.dumps(create_default_document().to_dict()), encoding="utf-8")

        assert main(["recover", str(path), "-f", "mjml"]) == 0
        assert capsys.readouterr().out.startswith("<mjml>")

    def test_unrecoverable(self, tmp_path, capsys):
        """Test a reply without a document fails with the reason."""
        path = tmp_path / "reply.txt"
        path.write_text("Which colours do you prefer?", encoding="utf-8")

        assert main(["recover", str(path)]) == 1
        assert "Could not extract JSON from AI response" in capsys.readouterr().err


class TestStarters:
    """Test the starters command."""

    def test_list(self, capsys):
        """Test starters are listed with descriptions."""
        assert main(["starters"]) == 0

        out = capsys.readouterr().out
        for starter_id in ("blank", "newsletter", "welcome", "promotion"):
            assert starter_id in out

    def test_dump_mjml(self, capsys):
        """Test a starter is dumped as MJML by default."""
        assert main(["starters", "promotion"]) == 0
        assert "<mj-wrapper" in capsys.readouterr().out

    def test_dump_json(self, capsys):
        """Test a starter can be dumped as design JSON."""
        assert main(["starters", "welcome", "-f", "json"]) == 0
        assert json.loads(capsys.readouterr().out)["_version"] == 1

    def test_unknown(self, capsys):
        """Test an unknown starter name fails."""
        assert main(["starters", "holiday"]) == 1
        assert "Unknown starter: holiday" in capsys.readouterr().err
