"""
Tests for the command-line interface.

Argument handling and validation are exercised through ``main``; network
paths go through ``run_check`` with a MockTransport-backed client.
"""

import asyncio
import json
from io import StringIO

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from rdap_checker.cli import (
    create_parser,
    exit_code_for,
    format_diagnostic,
    format_table,
    main,
    normalize_domains,
    read_stdin_domains,
    run_check,
)
from rdap_checker.config import CheckerConfig, CheckOptions
from rdap_checker.enums import BatchStatus, DomainStatus
from rdap_checker.models import CheckResult


class TtyStream(StringIO):
    def isatty(self) -> bool:
        return True


def registry(statuses: dict[str, int]):
    """Aggregator stub answering each domain with a fixed HTTP status."""

    def handler(request: httpx.Request) -> httpx.Response:
        domain = request.url.path.rsplit("/", 1)[-1]
        status = statuses[domain]
        if status == 200:
            return httpx.Response(200, json={"ldhName": domain})
        return httpx.Response(status, json={"errorCode": status})

    return handler


def check(domains, statuses, config=None, **kwargs) -> int:
    config = config or CheckerConfig(options=CheckOptions(fallback=False))

    async def run():
        transport = httpx.MockTransport(registry(statuses))
        async with httpx.AsyncClient(transport=transport, follow_redirects=True) as client:
            return await run_check(domains, config, client=client, **kwargs)

    return asyncio.run(run())


class TestExitCodes:
    def test_mapping(self) -> None:
        assert exit_code_for(BatchStatus.AVAILABLE) == 0
        assert exit_code_for(BatchStatus.REGISTERED) == 1
        assert exit_code_for(BatchStatus.MIXED) == 1
        assert exit_code_for(BatchStatus.ERROR) == 2


class TestReadStdin:
    def test_reads_non_blank_lines(self) -> None:
        assert read_stdin_domains(StringIO("a.com\n\n  b.org  \r\n")) == ["a.com", "b.org"]

    def test_tty_is_not_read(self) -> None:
        assert read_stdin_domains(TtyStream("a.com\n")) == []

    @given(lines=st.lists(st.text(alphabet="abc.\t ", max_size=10), max_size=10))
    @settings(max_examples=50)
    def test_never_returns_blank_entries(self, lines: list[str]) -> None:
        result = read_stdin_domains(StringIO("\n".join(lines)))

        assert all(entry and entry == entry.strip() for entry in result)


class TestFormatting:
    def test_table_is_aligned(self) -> None:
        results = [
            CheckResult("example.com", DomainStatus.REGISTERED, 200, None, "https://rdap.verisign.com/com/v1/", 123),
            CheckResult("a.io", DomainStatus.UNKNOWN, None, None, None, 0),
        ]

        lines = format_table(results)

        assert lines[0].split() == ["DOMAIN", "STATUS", "TIME", "SOURCE"]
        assert set(lines[1]) == {"-"}
        assert lines[2].split() == ["example.com", "REGISTERED", "123ms", "rdap.verisign.com"]
        assert lines[3].split() == ["a.io", "UNKNOWN", "-", "-"]
        assert lines[2].index("REGISTERED") == lines[0].index("STATUS")
        assert lines[3].index("UNKNOWN") == lines[0].index("STATUS")

    def test_hostname_source_is_kept(self) -> None:
        lines = format_table([CheckResult("x.com", DomainStatus.AVAILABLE, 404, 404, "rdap.org", 5)])

        assert lines[2].split()[-1] == "rdap.org"

    def test_diagnostic_only_for_unknown_with_status(self) -> None:
        assert format_diagnostic(CheckResult("x.com", DomainStatus.UNKNOWN, 503, 42)) == "HTTP 503, Error 42"
        assert format_diagnostic(CheckResult("x.com", DomainStatus.UNKNOWN, 500)) == "HTTP 500"
        assert format_diagnostic(CheckResult("x.com", DomainStatus.UNKNOWN)) is None
        assert format_diagnostic(CheckResult("x.com", DomainStatus.REGISTERED, 200)) is None


class TestRunCheck:
    def test_single_available_domain(self, capsys) -> None:
        code = check(["free.com"], {"free.com": 404})

        assert code == 0
        assert capsys.readouterr().out == "available\n"

    def test_multiple_domains_in_input_order(self, capsys) -> None:
        code = check(
            ["taken.com", "free.com", "other.com"],
            {"taken.com": 200, "free.com": 404, "other.com": 200},
            config=CheckerConfig(options=CheckOptions(fallback=False), concurrency=1),
        )

        assert code == 1
        assert capsys.readouterr().out.splitlines() == [
            "taken.com: registered",
            "free.com: available",
            "other.com: registered",
        ]

    def test_all_registered(self, capsys) -> None:
        assert check(["a.com", "b.com"], {"a.com": 200, "b.com": 200}) == 1

    def test_unknown_gives_error_exit_and_diagnostic(self, capsys) -> None:
        code = check(["a.com", "b.com"], {"a.com": 404, "b.com": 503}, verbose=True)

        captured = capsys.readouterr()
        assert code == 2
        out_lines = captured.out.splitlines()
        assert out_lines[0].split() == ["DOMAIN", "STATUS", "TIME", "SOURCE"]
        assert out_lines[3].split()[:2] == ["b.com", "UNKNOWN"]
        assert "HTTP 503, Error 503" in captured.err

    def test_quiet_suppresses_stdout(self, capsys) -> None:
        code = check(["a.com"], {"a.com": 200}, quiet=True)

        assert code == 1
        assert capsys.readouterr().out == ""

    def test_stream_mode_prints_each_result(self, capsys) -> None:
        code = check(["a.com", "b.com"], {"a.com": 404, "b.com": 404}, stream=True)

        assert code == 0
        assert sorted(capsys.readouterr().out.splitlines()) == ["a.com: available", "b.com: available"]

    def test_output_file(self, tmp_path, capsys) -> None:
        output = tmp_path / "out" / "results.json"

        check(["a.com", "b.com"], {"a.com": 404, "b.com": 200}, output_file=output)

        data = json.loads(output.read_text(encoding="utf-8"))
        assert [entry["domain"] for entry in data] == ["a.com", "b.com"]
        assert data[0]["status"] == "available"
        assert data[0]["http_status"] == 404
        assert data[1]["status"] == "registered"
        assert data[1]["source"] == "rdap.org"


class TestNormalizeDomains:
    def test_inputs_are_canonicalized(self) -> None:
        domains, invalid = normalize_domains(["Example.COM", " münchen.de ", "nodot"])

        assert domains == ["example.com", "xn--mnchen-3ya.de"]
        assert invalid == ["nodot"]

    @given(names=st.lists(st.from_regex(r"[a-z0-9]{1,10}\.(com|org|de)", fullmatch=True), max_size=10))
    @settings(max_examples=50)
    def test_canonical_names_unchanged_by_case(self, names: list[str]) -> None:
        """*For any* ASCII names, upper-cased input SHALL normalize to the lower-case name."""
        domains, invalid = normalize_domains([name.upper() for name in names])

        assert domains == names
        assert invalid == []


class TestMain:
    def test_no_domains(self, capsys) -> None:
        assert main([], stdin=StringIO("")) == 2
        assert "No domains provided" in capsys.readouterr().err

    def test_invalid_domains_stop_before_network(self, capsys) -> None:
        assert main(["example.com", "nodot", "-bad.com"], stdin=StringIO("")) == 2
        assert "Invalid domain(s): nodot, -bad.com" in capsys.readouterr().err

    def test_invalid_stdin_domain(self, capsys) -> None:
        assert main([], stdin=StringIO("example.com\nbad_name\n")) == 2
        assert "bad_name" in capsys.readouterr().err

    def test_quiet_suppresses_errors(self, capsys) -> None:
        assert main(["-q", "nodot"], stdin=StringIO("")) == 2
        assert capsys.readouterr().err == ""

    def test_domains_are_normalized_before_checking(self, monkeypatch) -> None:
        seen = {}

        async def fake_run_check(domains, config, **kwargs):
            seen["domains"] = domains
            seen["logger"] = kwargs["logger"]
            return 0

        monkeypatch.setattr("rdap_checker.cli.run_check", fake_run_check)

        assert main(["Example.COM"], stdin=StringIO(" Bücher.de\n")) == 0
        assert seen["domains"] == ["example.com", "xn--bcher-kva.de"]
        assert seen["logger"].entries == []

    def test_unreadable_config(self, tmp_path, capsys) -> None:
        path = tmp_path / "config.json"
        path.write_text("{oops", encoding="utf-8")

        assert main(["--config", str(path), "example.com"], stdin=StringIO("")) == 2

    def test_invalid_log_level_in_config(self, tmp_path, capsys) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"logging": {"level": "loud"}}), encoding="utf-8")

        assert main(["--config", str(path), "example.com"], stdin=StringIO("")) == 2
        assert "Invalid log level" in capsys.readouterr().err

    def test_parser_options(self) -> None:
        args = create_parser().parse_args(
            ["a.com", "b.com", "-v", "-c", "3", "-t", "1500", "--no-fallback", "--stream", "-o", "r.json"]
        )

        assert args.domains == ["a.com", "b.com"]
        assert args.verbose and args.stream and args.no_fallback
        assert args.concurrency == 3
        assert args.timeout == 1500
        assert args.output == "r.json"

    def test_version(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "rdap-check" in capsys.readouterr().out
