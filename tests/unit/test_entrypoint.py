"""
Unit tests for the container entry process.
"""
import os
import shutil
import subprocess

import pytest
from placeholder_page.ARTIFACT import entrypoint
from placeholder_page.ARTIFACT.entrypoint import (
    PLACEHOLDER_TOKEN,
    main,
    render_page,
    resolve_port,
    shell_command,
)

TEMPLATE = (
    "<p>Port [PORT_PLACEHOLDER]</p>\n"
    "<a href=\"http://localhost:[PORT_PLACEHOLDER]/\">[PORT_PLACEHOLDER]</a>\n"
)


class TestRenderPage:
    """Tests for the placeholder substitution."""

    def test_replaces_every_occurrence(self):
        page = render_page(TEMPLATE, "8510")
        assert PLACEHOLDER_TOKEN not in page
        assert page.count("8510") == 3

    def test_leaves_other_text_alone(self):
        page = render_page("<b>[PORT]</b> $PORT {{port}}", "9000")
        assert page == "<b>[PORT]</b> $PORT {{port}}"

    def test_token_is_literal_not_a_pattern(self):
        # '[PORT_PLACEHOLDER]' as a regex would match single characters.
        page = render_page("P [PORT_PLACEHOLDER] O", "81")
        assert page == "P 81 O"

    def test_deterministic(self):
        assert render_page(TEMPLATE, "80") == render_page(TEMPLATE, "80")


class TestResolvePort:
    """Tests for reading the port from the environment."""

    def test_uses_port_variable(self):
        assert resolve_port({"PORT": "8510"}) == "8510"

    @pytest.mark.parametrize("environ", [{}, {"PORT": ""}])
    def test_defaults_to_80(self, environ):
        assert resolve_port(environ) == "80"


class TestMain:
    """Tests for the entry process as a whole."""

    def test_writes_rendered_page(self, tmp_path):
        template = tmp_path / "index.html"
        output = tmp_path / "html" / "index.html"
        output.parent.mkdir()
        template.write_text(TEMPLATE)

        main({"PORT": "8510"}, str(template), str(output), exec_server=False)

        assert output.read_text() == render_page(TEMPLATE, "8510")

    def test_default_port_when_unset(self, tmp_path):
        template = tmp_path / "index.html"
        output = tmp_path / "out.html"
        template.write_text(TEMPLATE)

        main({}, str(template), str(output), exec_server=False)

        assert PLACEHOLDER_TOKEN not in output.read_text()
        assert output.read_text().count("80") == 3

    def test_execs_nginx_in_foreground(self, tmp_path, monkeypatch):
        template = tmp_path / "index.html"
        template.write_text(TEMPLATE)
        calls = []
        monkeypatch.setattr(entrypoint.os, "execvp", lambda file, args: calls.append((file, args)))

        main({"PORT": "80"}, str(template), str(tmp_path / "out.html"))

        assert calls == [("nginx", ["nginx", "-g", "daemon off;"])]


@pytest.mark.skipif(
    shutil.which("sh") is None or shutil.which("sed") is None,
    reason="needs a POSIX shell and sed",
)
class TestShellCommand:
    """The image's shell line must render the same page as main()."""

    def _run(self, tmp_path, environ):
        template = tmp_path / "index.html"
        output = tmp_path / "out.html"
        template.write_text(TEMPLATE)
        script = shell_command(
            template_path=str(template),
            output_path=str(output),
            server_command=["true"],
        )
        env = {"PATH": os.environ.get("PATH", os.defpath), **environ}
        subprocess.run(["sh", "-c", script], env=env, check=True)
        return output.read_text()

    def test_matches_reference_for_port(self, tmp_path):
        assert self._run(tmp_path, {"PORT": "8510"}) == render_page(TEMPLATE, "8510")

    @pytest.mark.parametrize("environ", [{}, {"PORT": ""}])
    def test_matches_reference_for_default(self, tmp_path, environ):
        assert self._run(tmp_path, environ) == render_page(TEMPLATE, resolve_port(environ))

    def test_hands_over_to_server(self):
        assert shell_command().endswith("&& exec nginx -g 'daemon off;'")
