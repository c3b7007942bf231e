"""Tests for openproof.cli module.

Drives ``main()`` end to end with a mocked registry and checks that every
failure kind is reported on stderr with its own exit code.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import pytest
import respx

from openproof import __version__
from openproof.cli import build_parser, main
from openproof.config import ClientConfig
from openproof.credentials import EnvOverrideTokenStore, FileTokenStore, InMemoryTokenStore
from openproof.errors import ExitCode

BASE_URL = "https://registry.test"

ARTICLE = "---\ntitle: T\n---\nbody\n"


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------


class TestRouting:
    """First-argument dispatch and usage handling."""

    def test_no_arguments_prints_usage(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([]) == ExitCode.USAGE
        assert "usage: openproof" in capsys.readouterr().err

    def test_unknown_command_prints_usage(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["frobnicate"]) == ExitCode.USAGE
        err = capsys.readouterr().err
        assert "Unknown command: frobnicate" in err
        assert "usage: openproof" in err

    def test_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--help"]) == ExitCode.OK
        assert "register" in capsys.readouterr().out

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--version"]) == ExitCode.OK
        assert capsys.readouterr().out.strip() == f"openproof {__version__}"

    def test_list_and_search_share_options(self) -> None:
        assert build_parser("list").parse_args(["q1"]).query == "q1"
        assert build_parser("search").parse_args([]).query is None

    def test_register_options_are_optional(self) -> None:
        args = build_parser("register").parse_args(["--name", "bot"])
        assert args.name == "bot"
        assert args.email is None

    def test_invalid_timeout_is_a_usage_error(self, config: ClientConfig) -> None:
        assert main(["list", "--timeout", "0"], config=config) == ExitCode.USAGE


# ---------------------------------------------------------------------------
# Successful runs
# ---------------------------------------------------------------------------


class TestCommands:
    """Happy paths through main()."""

    @respx.mock
    def test_register_then_publish(
        self, config: ClientConfig, token_path: Path, tmp_path: Path
    ) -> None:
        respx.post(f"{BASE_URL}/register").mock(
            return_value=httpx.Response(200, json={"api_key": "abc123XYZ789", "agent_id": "ag-1"})
        )
        publish = respx.post(f"{BASE_URL}/publish").mock(
            return_value=httpx.Response(201, json={"id": "d-1", "slug": "t"})
        )
        store = FileTokenStore(token_path)
        article = tmp_path / "post.md"
        article.write_text(ARTICLE)

        assert main(["register", "--name", "bot"], config=config, store=store) == ExitCode.OK
        assert main(["publish", str(article)], config=config, store=store) == ExitCode.OK
        assert publish.calls.last.request.headers["Authorization"] == "Bearer abc123XYZ789"

    @respx.mock
    def test_search_with_query(
        self, config: ClientConfig, capsys: pytest.CaptureFixture[str]
    ) -> None:
        route = respx.get(f"{BASE_URL}/documents").mock(
            return_value=httpx.Response(
                200, json={"total": 1, "documents": [{"type": "article", "title": "A", "id": "1"}]}
            )
        )

        code = main(["search", "lattice"], config=config, store=InMemoryTokenStore())

        assert code == ExitCode.OK
        assert route.calls.last.request.url.params["q"] == "lattice"
        assert capsys.readouterr().out.splitlines() == ["[article] A (ID: 1)", "Total: 1"]

    @respx.mock
    def test_environment_token_is_used_for_publish(
        self, config: ClientConfig, token_path: Path, tmp_path: Path
    ) -> None:
        route = respx.post(f"{BASE_URL}/publish").mock(
            return_value=httpx.Response(201, json={"id": "d-1"})
        )
        backing = FileTokenStore(token_path)
        backing.save("file-token")
        store = EnvOverrideTokenStore(backing, environ={"OPENPROOF_TOKEN": "env-token"})
        article = tmp_path / "post.md"
        article.write_text(ARTICLE)

        assert main(["publish", str(article)], config=config, store=store) == ExitCode.OK
        assert route.calls.last.request.headers["Authorization"] == "Bearer env-token"

    @respx.mock
    def test_base_url_option_overrides_config(self, config: ClientConfig) -> None:
        route = respx.get("https://other.test/v2/documents").mock(
            return_value=httpx.Response(200, json=[])
        )

        code = main(
            ["list", "--base-url", "https://other.test/v2"],
            config=config,
            store=InMemoryTokenStore(),
        )

        assert code == ExitCode.OK
        assert route.called

    def test_logout(self, config: ClientConfig, token_path: Path) -> None:
        store = FileTokenStore(token_path)
        store.save("tok")
        assert main(["logout"], config=config, store=store) == ExitCode.OK
        assert not token_path.exists()


# ---------------------------------------------------------------------------
# Failure exit codes
# ---------------------------------------------------------------------------


class TestExitCodes:
    """Each error kind maps to its own exit code and writes to stderr."""

    @pytest.mark.parametrize("argv", [["register", "--name", "bot"], ["publish", "ARTICLE"], ["list"]])
    def test_remote_rejection(
        self,
        argv: list[str],
        config: ClientConfig,
        token_path: Path,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        article = tmp_path / "post.md"
        article.write_text(ARTICLE)
        argv = [str(article) if a == "ARTICLE" else a for a in argv]
        store = EnvOverrideTokenStore(
            FileTokenStore(token_path), environ={"OPENPROOF_TOKEN": "tok"}
        )

        with respx.mock(assert_all_called=False) as router:
            for method in ("GET", "POST"):
                router.route(method=method, host="registry.test").mock(
                    return_value=httpx.Response(401, text="unauthorized")
                )
            code = main(argv, config=config, store=store)

        assert code == ExitCode.REMOTE_REJECTED
        assert router.calls.call_count == 1
        captured = capsys.readouterr()
        assert "HTTP 401" in captured.err
        assert "unauthorized" in captured.err
        assert captured.out == ""
        assert not token_path.parent.exists()

    def test_missing_credential(
        self, config: ClientConfig, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        article = tmp_path / "post.md"
        article.write_text(ARTICLE)

        code = main(["publish", str(article)], config=config, store=InMemoryTokenStore())

        assert code == ExitCode.MISSING_CREDENTIAL
        assert "OPENPROOF_TOKEN" in capsys.readouterr().err

    def test_missing_file(self, config: ClientConfig, tmp_path: Path) -> None:
        code = main(
            ["publish", str(tmp_path / "nope.md")],
            config=config,
            store=InMemoryTokenStore("tok"),
        )
        assert code == ExitCode.MISSING_FILE

    @respx.mock
    def test_transport_failure(
        self, config: ClientConfig, capsys: pytest.CaptureFixture[str]
    ) -> None:
        respx.get(f"{BASE_URL}/documents").mock(side_effect=httpx.ConnectError)

        code = main(["list"], config=config, store=InMemoryTokenStore())

        assert code == ExitCode.TRANSPORT
        assert "ConnectError" in capsys.readouterr().err

    @respx.mock
    def test_timeout(self, config: ClientConfig, capsys: pytest.CaptureFixture[str]) -> None:
        respx.get(f"{BASE_URL}/documents").mock(side_effect=httpx.ReadTimeout)

        code = main(["list", "--timeout", "2"], config=config, store=InMemoryTokenStore())

        assert code == ExitCode.TIMEOUT
        assert "timed out after 2s" in capsys.readouterr().err

    def test_overall_deadline(
        self, config: ClientConfig, capsys: pytest.CaptureFixture[str]
    ) -> None:
        async def stall(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json=[])

        code = main(
            ["list", "--timeout", "0.05"],
            config=config,
            store=InMemoryTokenStore(),
            http_transport=httpx.MockTransport(stall),
        )

        assert code == ExitCode.TIMEOUT
        assert "timed out after 0.05s" in capsys.readouterr().err

    def test_undecodable_article(self, config: ClientConfig, tmp_path: Path) -> None:
        article = tmp_path / "post.md"
        article.write_bytes(b"---\ntitle: \xff\n---\n")

        code = main(["publish", str(article)], config=config, store=InMemoryTokenStore("tok"))

        assert code == ExitCode.UNREADABLE_FILE

    @respx.mock
    def test_malformed_registration(
        self, config: ClientConfig, token_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        respx.post(f"{BASE_URL}/register").mock(
            return_value=httpx.Response(200, json={"message": "queued"})
        )

        code = main(["register"], config=config, store=FileTokenStore(token_path))

        assert code == ExitCode.MALFORMED_RESPONSE
        err = capsys.readouterr().err
        assert "api_key" in err
        assert "queued" in err
        assert not token_path.exists()

    @respx.mock
    def test_token_write_failure(self, config: ClientConfig, tmp_path: Path) -> None:
        respx.post(f"{BASE_URL}/register").mock(
            return_value=httpx.Response(200, json={"api_key": "k", "agent_id": "a"})
        )
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        code = main(["register"], config=config, store=FileTokenStore(blocker / "token"))

        assert code == ExitCode.CREDENTIAL_STORE
