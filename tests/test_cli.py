"""Tests for the imaginarium CLI: tell, imagine and repl subcommands."""

import json
from unittest.mock import patch

import pytest

from imaginarium.cli.exitcodes import EXIT_ERROR, EXIT_SUCCESS, EXIT_UNSATISFIABLE
from imaginarium.cli.main import main

DEFINITIONS = """\
# Pets
a dog is a kind of animal
a cat is a kind of animal
cats can be black or white
"""


@pytest.fixture
def defs_file(tmp_path):
    path = tmp_path / "pets.txt"
    path.write_text(DEFINITIONS, encoding="utf-8")
    return path


class TestMain:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "tell" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert "imaginarium" in capsys.readouterr().out


class TestTellCommand:
    def test_tell_creates_file(self, tmp_path, capsys):
        path = tmp_path / "new.txt"
        assert main(["tell", "-f", str(path), "--create", "a dog is a kind of animal"]) == EXIT_SUCCESS
        assert path.read_text(encoding="utf-8") == "a dog is a kind of animal\n"
        assert "Dogs are kinds of animal." in capsys.readouterr().out

    def test_tell_appends(self, defs_file):
        assert main(["tell", "-f", str(defs_file), "Rex is a dog"]) == EXIT_SUCCESS
        lines = defs_file.read_text(encoding="utf-8").splitlines()
        assert lines[-1] == "Rex is a dog"
        assert "cats can be black or white" in lines

    def test_tell_missing_file(self, tmp_path, capsys):
        rc = main(["tell", "-f", str(tmp_path / "none.txt"), "a dog is a kind of animal"])
        assert rc == EXIT_ERROR
        assert "--create" in capsys.readouterr().err

    def test_tell_bad_sentence(self, defs_file, capsys):
        before = defs_file.read_text(encoding="utf-8")
        assert main(["tell", "-f", str(defs_file), "the sky is purple the"]) == EXIT_ERROR
        assert "I don't understand" in capsys.readouterr().err
        assert defs_file.read_text(encoding="utf-8") == before

    def test_tell_rejects_commands(self, defs_file, capsys):
        assert main(["tell", "-f", str(defs_file), "imagine a cat"]) == EXIT_ERROR
        assert "Not a definition" in capsys.readouterr().err

    def test_tell_json(self, defs_file, capsys):
        assert main(["tell", "-f", str(defs_file), "--json", "Rex is a dog"]) == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["action"] == "told"
        assert data["response"] == "Rex is a dog."

    def test_tell_json_error(self, defs_file, capsys):
        main(["tell", "-f", str(defs_file), "--json", "a dog is kind of animal"])
        data = json.loads(capsys.readouterr().out)
        assert data["error"].startswith("I don't understand")
        assert data["hints"]

    def test_tell_quiet(self, defs_file, capsys):
        assert main(["tell", "-f", str(defs_file), "-q", "Rex is a dog"]) == EXIT_SUCCESS
        assert capsys.readouterr().out == ""

    def test_tell_batch(self, tmp_path):
        path = tmp_path / "world.txt"
        batch = tmp_path / "batch.txt"
        batch.write_text(
            "a dog is a kind of animal\n\n# comment\nnonsense nonsense nonsense the\nRex is a dog\n",
            encoding="utf-8",
        )
        rc = main(["tell", "-f", str(path), "--create", "--batch", str(batch), "-q"])
        assert rc == EXIT_ERROR
        assert path.read_text(encoding="utf-8").splitlines() == [
            "a dog is a kind of animal",
            "Rex is a dog",
        ]


class TestImagineCommand:
    def test_imagine(self, defs_file, capsys):
        assert main(["imagine", "-f", str(defs_file), "--seed", "1", "imagine 3 cats"]) == EXIT_SUCCESS
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 3
        assert all(line.startswith("cat ") for line in lines)

    def test_imagine_prefix_added(self, defs_file, capsys):
        assert main(["imagine", "-f", str(defs_file), "2 dogs"]) == EXIT_SUCCESS
        assert len(capsys.readouterr().out.splitlines()) == 2

    def test_how_many(self, defs_file, capsys):
        defs_file.write_text(DEFINITIONS + "Rex is a dog\n", encoding="utf-8")
        assert main(["imagine", "-f", str(defs_file), "how many dogs are there"]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "There is 1 dog." in out
        assert "Rex is a dog." in out

    def test_imagine_json(self, defs_file, capsys):
        assert main(["imagine", "-f", str(defs_file), "--json", "imagine a dog"]) == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["status"] == "OK"
        assert data["descriptions"] == ["dog 1 is a dog."]

    def test_unsatisfiable(self, defs_file, capsys):
        defs_file.write_text(
            DEFINITIONS + "dogs can chase one cat\nRex is a dog\nFelix is a cat\nTom is a cat\n"
            "Rex chases Felix\nRex chases Tom\n",
            encoding="utf-8",
        )
        rc = main(["imagine", "-f", str(defs_file), "--json", "how many cats are there"])
        assert rc == EXIT_UNSATISFIABLE
        assert json.loads(capsys.readouterr().out)["status"] == "UNSATISFIABLE"

    def test_unknown_kind(self, defs_file, capsys):
        assert main(["imagine", "-f", str(defs_file), "imagine a unicorn"]) == EXIT_ERROR
        assert "unicorn" in capsys.readouterr().err

    def test_bad_definitions_file(self, tmp_path, capsys):
        path = tmp_path / "bad.txt"
        path.write_text("the sky is purple the\n", encoding="utf-8")
        assert main(["imagine", "-f", str(path), "imagine a cat"]) == EXIT_ERROR
        assert "I don't understand" in capsys.readouterr().err

    def test_definitions_directory(self, tmp_path, capsys):
        (tmp_path / "cat.txt").write_text("cats can be black or white\n", encoding="utf-8")
        path = tmp_path / "world.txt"
        path.write_text("a cat is a kind of animal\n", encoding="utf-8")
        rc = main(["imagine", "-f", str(path), "-d", str(tmp_path), "what is a cat"])
        assert rc == EXIT_SUCCESS
        assert "Cats can be black or white." in capsys.readouterr().out


class TestReplCommand:
    def run(self, *lines, args=("repl",)):
        with patch("builtins.input", side_effect=[*lines, "quit"]):
            return main(list(args))

    def test_quit(self, capsys):
        assert self.run() == 0
        assert "Starting with empty definitions." in capsys.readouterr().out

    def test_eof(self, capsys):
        with patch("builtins.input", side_effect=EOFError):
            assert main(["repl"]) == 0

    def test_sentences_and_generation(self, capsys):
        self.run("a dog is a kind of animal", "imagine 2 dogs")
        out = capsys.readouterr().out
        assert "Dogs are kinds of animal." in out
        assert "dog 1 is a dog." in out
        assert "dog 2 is a dog." in out

    def test_error_with_hints(self, capsys):
        self.run("a dog is kind of animal")
        out = capsys.readouterr().out
        assert "Error: I don't understand" in out
        assert "Did you mean one of:" in out

    def test_help_and_rules(self, capsys):
        self.run("help", "rules")
        out = capsys.readouterr().out
        assert "show history" in out
        assert "<kinds> can <verb> each other" in out

    def test_show(self, capsys):
        self.run("a dog is a kind of animal", "Rex is a dog", "show", "show history")
        out = capsys.readouterr().out
        assert "Kinds (2):" in out
        assert "  dog < animal" in out
        assert "  Rex: dog" in out
        assert "  Rex is a dog" in out

    def test_save_and_load(self, tmp_path, capsys):
        path = tmp_path / "saved.txt"
        self.run("a dog is a kind of animal", f"save {path}")
        assert path.read_text(encoding="utf-8") == "a dog is a kind of animal\n"
        self.run(f"load {path}", "what are dogs")
        out = capsys.readouterr().out
        assert f"Loaded from {path}" in out
        assert "A dog is a kind of animal." in out

    def test_load_missing(self, tmp_path, capsys):
        self.run(f"load {tmp_path / 'missing.txt'}")
        assert "Error loading:" in capsys.readouterr().out

    def test_loads_file(self, defs_file, capsys):
        self.run("what is a cat", args=("repl", "-f", str(defs_file)))
        out = capsys.readouterr().out
        assert f"Loaded definitions from {defs_file}" in out
        assert "Cats can be black or white." in out
