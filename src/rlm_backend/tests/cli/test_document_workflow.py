"""
Test suite for the document, chunking, navigation and result commands.

Drives the `rlm` app through a full load, chunk, iterate, store and
aggregate cycle against an isolated session directory.
"""

import json

import pytest
from typer.testing import CliRunner

from rlm_backend.cli.cli import app

runner = CliRunner()

UNIFORM_TEXT = "A" * 100 + "B" * 100 + "C" * 50

MARKDOWN_TEXT = (
    "# Guide\n\nIntro text.\n\n"
    "## Install\n\nRun the installer.\n\n"
    "## Usage\n\nCall the tool.\n\n"
    "### Options\n\nFlags explained.\n"
)


def invoke(*args, **kwargs):
    return runner.invoke(app, list(args), **kwargs)


def invoke_json(*args):
    result = invoke(*args)
    assert result.exit_code == 0, result.stdout
    return json.loads(result.stdout)


@pytest.fixture
def uniform_doc(cli_env):
    (cli_env.work_dir / "doc.txt").write_text(UNIFORM_TEXT, encoding="utf-8")
    return cli_env


@pytest.fixture
def markdown_doc(cli_env):
    (cli_env.work_dir / "guide.md").write_text(MARKDOWN_TEXT, encoding="utf-8")
    return cli_env


class TestLoadAndInfo:
    """Test loading documents and inspecting the session."""

    def test_load_file(self, uniform_doc):
        """Test that loading reports success and stores the document."""
        result = invoke("load", "doc.txt")

        assert result.exit_code == 0
        assert "Document loaded successfully." in result.stdout
        assert (uniform_doc.session_dir / ".rlm-session.json").is_file()

    def test_info_json_after_load(self, uniform_doc):
        """Test the machine-readable session summary."""
        invoke("load", "doc.txt")

        data = invoke_json("info", "--json")

        assert data["source"] == "doc.txt"
        assert data["totalLength"] == 250
        assert data["chunkCount"] == 0
        assert data["recursionDepth"] == 0
        assert data["maxRecursionDepth"] == 5

    def test_info_without_document(self, cli_env):
        """Test info on an empty session."""
        result = invoke("info")

        assert result.exit_code == 0
        assert "No document loaded." in result.stdout
        assert invoke_json("info", "--json") == {}

    def test_info_progress(self, uniform_doc):
        """Test the progress view once chunks exist."""
        invoke("load", "doc.txt")
        invoke("chunk", "--strategy", "uniform", "--size", "100")

        result = invoke("info", "--progress")

        assert result.exit_code == 0
        assert "Progress:" in result.stdout
        assert "1 / 3" in result.stdout

    def test_load_missing_file(self, cli_env):
        """Test that a missing file exits with an error."""
        result = invoke("load", "missing.txt")

        assert result.exit_code == 1
        assert "File Not Found" in result.stdout

    def test_load_directory_merge(self, cli_env):
        """Test merging a directory into one document."""
        docs = cli_env.work_dir / "docs"
        docs.mkdir()
        (docs / "a.md").write_text("alpha", encoding="utf-8")
        (docs / "b.md").write_text("beta", encoding="utf-8")

        result = invoke("load", "docs", "--pattern", "*.md", "--merge")

        assert result.exit_code == 0
        assert "2 document(s) loaded successfully." in result.stdout
        assert invoke_json("info", "--json")["totalLength"] == len("# a.md\n\nalpha\n---\n\n# b.md\n\nbeta")

    def test_load_stdin(self, cli_env):
        """Test loading from standard input."""
        result = invoke("load", "-", input="piped content")

        assert result.exit_code == 0
        assert invoke_json("info", "--json")["source"] == "stdin"

    def test_slice_negative_range(self, cli_env):
        """Test slicing from the end of the document."""
        (cli_env.work_dir / "hello.txt").write_text("Hello, World!", encoding="utf-8")
        invoke("load", "hello.txt")

        result = invoke("slice", "--", "-6:")

        assert result.exit_code == 0
        assert "6 chars" in result.stdout
        assert result.stdout.rstrip("\n").endswith("World!")

    def test_slice_invalid_range(self, cli_env):
        """Test that an inverted range is rejected."""
        (cli_env.work_dir / "hello.txt").write_text("Hello, World!", encoding="utf-8")
        invoke("load", "hello.txt")

        result = invoke("slice", "5:1")

        assert result.exit_code == 1
        assert "Invalid Argument" in result.stdout

    def test_slice_without_document(self, cli_env):
        """Test that slicing needs a document."""
        result = invoke("slice", "0:10")

        assert result.exit_code == 1
        assert "No document loaded" in result.stdout


class TestChunkCommand:
    """Test chunking strategies from the command line."""

    def test_uniform_json(self, uniform_doc):
        """Test uniform chunking with JSON output."""
        invoke("load", "doc.txt")

        data = invoke_json("chunk", "--strategy", "uniform", "--size", "100", "--json")

        assert data["strategy"] == "uniform"
        assert data["selectedStrategy"] == "uniform"
        assert data["chunkCount"] == 3
        assert data["chunks"][0]["content"] == "A" * 100
        assert data["chunks"][2]["endPosition"] == 250
        assert data["chunks"][0]["metadata"]["wordCount"] == "1"

    def test_text_output_shows_first_chunk(self, uniform_doc):
        """Test that the text view ends with the first chunk."""
        invoke("load", "doc.txt")

        result = invoke("chunk", "--strategy", "uniform", "--size", "100")

        assert result.exit_code == 0
        assert "A" * 100 in result.stdout

    def test_default_strategy_from_config(self, markdown_doc):
        """Test that the configuration file picks the strategy when none is given."""
        config = {"chunking": {"default_strategy": "semantic"}}
        (markdown_doc.work_dir / "rlm.config.json").write_text(json.dumps(config), encoding="utf-8")
        invoke("load", "guide.md")

        data = invoke_json("chunk", "--json")

        assert data["strategy"] == "semantic"
        assert data["chunkCount"] == 4
        assert data["chunks"][3]["metadata"]["headerPath"] == "Guide > Usage > Options"

    def test_semantic_hybrid(self, markdown_doc):
        """Test semantic chunking with a filter pattern."""
        invoke("load", "guide.md")

        result = invoke("chunk", "-s", "semantic", "-p", "installer")

        assert result.exit_code == 0
        assert "Hybrid mode" in result.stdout
        assert invoke_json("info", "--json")["chunkCount"] == 1

    def test_auto_strategy(self, markdown_doc):
        """Test that auto reports the strategy it selected."""
        invoke("load", "guide.md")

        data = invoke_json("chunk", "-s", "auto", "-q", "compare sections", "--json")

        assert data["strategy"] == "auto"
        assert data["selectedStrategy"] == "semantic"
        assert all(c["metadata"]["selectedBy"] == "auto" for c in data["chunks"])

    def test_recursive(self, markdown_doc):
        """Test recursive chunking within a size limit."""
        invoke("load", "guide.md")

        data = invoke_json("chunk", "-s", "recursive", "--size", "40", "--json")

        assert all(len(c["content"]) <= 40 for c in data["chunks"])
        assert "".join(c["content"] for c in data["chunks"]) == MARKDOWN_TEXT

    def test_filter_command(self, cli_env):
        """Test the filter shorthand."""
        log = "ok line\nERROR disk full\nok line\n" + "filler " * 50 + "\nerror again"
        (cli_env.work_dir / "app.log").write_text(log, encoding="utf-8")
        invoke("load", "app.log")

        data = invoke_json("filter", "error", "--context", "5", "--json")

        assert data["strategy"] == "filter"
        assert data["chunkCount"] == 2

    def test_filter_without_matches_keeps_buffer(self, uniform_doc):
        """Test that a run without chunks leaves the previous buffer in place."""
        invoke("load", "doc.txt")
        invoke("chunk", "--strategy", "uniform", "--size", "100")

        result = invoke("filter", "zzz")

        assert result.exit_code == 0
        assert "No chunks created." in result.stdout
        assert invoke_json("info", "--json")["chunkCount"] == 3

    def test_chunk_without_document(self, cli_env):
        """Test that chunking needs a loaded document."""
        result = invoke("chunk")

        assert result.exit_code == 1
        assert "No document loaded" in result.stdout

    def test_unknown_strategy(self, uniform_doc):
        """Test that an unknown strategy name is rejected."""
        invoke("load", "doc.txt")

        result = invoke("chunk", "--strategy", "bogus")

        assert result.exit_code == 1
        assert "Unknown chunking strategy" in result.stdout

    def test_filter_strategy_without_pattern(self, uniform_doc):
        """Test that the filter strategy requires --pattern."""
        invoke("load", "doc.txt")

        result = invoke("chunk", "--strategy", "filter")

        assert result.exit_code == 1
        assert "requires a pattern" in result.stdout

    def test_bad_regex(self, uniform_doc):
        """Test that a malformed regex is reported as an invalid argument."""
        invoke("load", "doc.txt")

        result = invoke("filter", "(")

        assert result.exit_code == 1
        assert "Invalid Argument" in result.stdout


class TestIterationWorkflow:
    """Test walking the chunks, storing results and aggregating them."""

    def test_full_cycle(self, uniform_doc):
        """Test load, chunk, next, store and aggregate together."""
        assert invoke("load", "doc.txt").exit_code == 0
        assert invoke("chunk", "--strategy", "uniform", "--size", "100").exit_code == 0

        data = invoke_json("next", "--json")
        assert data["index"] == 1
        assert data["content"] == "B" * 100
        assert data["hasMore"] is True
        assert data["totalChunks"] == 3

        stored = invoke("store", "chunk_1", "Bs")
        assert stored.exit_code == 0
        assert "Stored: chunk_1" in stored.stdout

        assert invoke("next", "--raw").stdout == "C" * 50 + "\n"
        end = invoke("next", "--raw")
        assert end.exit_code == 0
        assert end.stdout == ""
        assert invoke_json("next", "--json") == {"done": True, "message": "No more chunks"}

        invoke("store", "chunk_2", "Cs")

        final = invoke("aggregate", "--final")
        assert final.exit_code == 0
        assert "FINAL(\n[chunk_1]\nBs\n\n---\n\n[chunk_2]\nCs\n)" in final.stdout

        data = invoke_json("aggregate", "--json")
        assert data["signal"] == "PARTIAL"
        assert data["resultCount"] == 2

        raw = invoke("aggregate", "--raw", "--separator", " | ")
        assert raw.stdout == "[chunk_1]\nBs | [chunk_2]\nCs\n"

    def test_next_text_at_end(self, cli_env):
        """Test the text message once every chunk has been visited."""
        (cli_env.work_dir / "small.txt").write_text("tiny", encoding="utf-8")
        invoke("load", "small.txt")
        invoke("chunk", "--strategy", "uniform", "--size", "100")

        result = invoke("next")

        assert result.exit_code == 0
        assert "No more chunks." in result.stdout

    def test_next_without_chunks(self, cli_env):
        """Test navigation errors in each output mode."""
        text = invoke("next")
        assert text.exit_code == 1
        assert "No chunks available" in text.stdout

        as_json = invoke("next", "--json")
        assert as_json.exit_code == 1
        assert "No chunks available" in json.loads(as_json.stdout)["error"]

        raw = invoke("next", "--raw")
        assert raw.exit_code == 1
        assert raw.stdout == ""

    def test_store_overwrites_and_reads_stdin(self, cli_env):
        """Test that '-' reads the value from stdin and keys are replaced."""
        invoke("store", "k", "first")
        invoke("store", "k", "-", input="from stdin")

        assert invoke_json("results", "--json") == {"k": "from stdin"}

    def test_results_table(self, cli_env):
        """Test the text listing of stored results."""
        invoke("store", "summary", "short value")

        result = invoke("results")

        assert result.exit_code == 0
        assert "Stored results: 1" in result.stdout
        assert "summary" in result.stdout

    def test_empty_results_and_aggregate(self, cli_env):
        """Test the messages shown when nothing is stored."""
        assert "No results stored." in invoke("results").stdout
        assert "No results to aggregate." in invoke("aggregate").stdout
        assert invoke_json("aggregate", "--json") == {"error": "No results to aggregate"}
        assert invoke("aggregate", "--raw").stdout == ""

    def test_separator_from_config(self, cli_env):
        """Test that the configured separator is used by default."""
        config = {"results": {"separator": "\n===\n"}}
        (cli_env.work_dir / "rlm.config.json").write_text(json.dumps(config), encoding="utf-8")
        invoke("store", "a", "1")
        invoke("store", "b", "2")

        assert invoke("aggregate", "--raw").stdout == "[a]\n1\n===\n[b]\n2\n"

    def test_import_plain_files(self, cli_env):
        """Test importing result files from a directory."""
        results_dir = cli_env.work_dir / "results"
        results_dir.mkdir()
        (results_dir / "part_a.txt").write_text("alpha result", encoding="utf-8")
        (results_dir / "part_b.txt").write_text("beta result", encoding="utf-8")

        result = invoke("import", "results/*.txt")

        assert result.exit_code == 0
        assert "Imported 2 result(s)." in result.stdout
        assert invoke_json("results", "--json") == {"part_a": "alpha result", "part_b": "beta result"}

    def test_import_without_matches(self, cli_env):
        """Test the message for a pattern that matches nothing."""
        result = invoke("import", "nothing/*.txt")

        assert result.exit_code == 0
        assert "No files found matching" in result.stdout
