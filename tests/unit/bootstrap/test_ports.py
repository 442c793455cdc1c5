"""Unit tests for port conflict resolution."""

from unittest.mock import MagicMock, patch

import pytest

from dcs_cli.bootstrap.ports import DEFAULT_PORTS, PortAction, PortPrompt, PortResolver, validate_port_input
from dcs_cli.errors import PortResolutionError


def make_prompt(action=PortAction.AUTO, port=None):
    prompt = MagicMock(spec=PortPrompt)
    prompt.choose_action.return_value = action
    prompt.ask_port.return_value = port
    return prompt


class TestPortResolver:
    """Tests for PortResolver."""

    def test_free_default_is_kept(self, fake_scanner, fake_stack):
        prompt = make_prompt()
        resolver = PortResolver(fake_scanner, fake_stack, prompt)

        assert resolver.resolve("backend", 3000) == 3000
        prompt.choose_action.assert_not_called()

    def test_port_held_by_our_service_is_kept(self, fake_scanner, fake_stack):
        fake_scanner.busy = {3000}
        fake_stack.publishing = {"backend": 3000}
        prompt = make_prompt()

        assert PortResolver(fake_scanner, fake_stack, prompt).resolve("backend", 3000) == 3000
        prompt.choose_action.assert_not_called()

    def test_port_held_by_another_service_auto(self, fake_scanner, fake_stack):
        fake_scanner.busy = {3000}
        resolver = PortResolver(fake_scanner, fake_stack, make_prompt(PortAction.AUTO))

        assert resolver.resolve("backend", 3000) == 3001

    def test_auto_skips_busy_neighbours(self, fake_scanner, fake_stack):
        fake_scanner.busy = {3000, 3001}
        resolver = PortResolver(fake_scanner, fake_stack, make_prompt(PortAction.AUTO))

        assert resolver.resolve("backend", 3000) == 3002

    def test_other_service_publishing_does_not_count(self, fake_scanner, fake_stack):
        fake_scanner.busy = {3000}
        fake_stack.publishing = {"log-streamer": 3000}
        prompt = make_prompt(PortAction.AUTO)

        assert PortResolver(fake_scanner, fake_stack, prompt).resolve("backend", 3000) == 3001
        prompt.choose_action.assert_called_once_with("backend", 3000)

    def test_custom_port(self, fake_scanner, fake_stack):
        fake_scanner.busy = {3000}
        prompt = make_prompt(PortAction.CUSTOM, port=4000)
        resolver = PortResolver(fake_scanner, fake_stack, prompt)

        assert resolver.resolve("backend", 3000) == 4000
        assert resolver.assigned == {"backend": 4000}

    def test_exit(self, fake_scanner, fake_stack):
        fake_scanner.busy = {3000}
        resolver = PortResolver(fake_scanner, fake_stack, make_prompt(PortAction.EXIT))

        with pytest.raises(PortResolutionError, match="cancelled"):
            resolver.resolve("backend", 3000)

    def test_resolve_all_defaults(self, fake_scanner, fake_stack):
        assert PortResolver(fake_scanner, fake_stack, make_prompt()).resolve_all() == DEFAULT_PORTS

    def test_no_two_services_share_a_port(self, fake_scanner, fake_stack):
        resolver = PortResolver(fake_scanner, fake_stack, make_prompt(PortAction.AUTO))
        ports = resolver.resolve_all({"backend": 5000, "log-streamer": 5000})

        assert ports == {"backend": 5000, "log-streamer": 5001}

    def test_claimed_port_is_not_reused_even_if_ours(self, fake_scanner, fake_stack):
        fake_stack.publishing = {"log-streamer": 5000}
        resolver = PortResolver(fake_scanner, fake_stack, make_prompt(PortAction.AUTO))
        ports = resolver.resolve_all({"backend": 5000, "log-streamer": 5000})

        assert len(set(ports.values())) == 2

    def test_is_free_excludes_assigned(self, fake_scanner, fake_stack):
        resolver = PortResolver(fake_scanner, fake_stack, make_prompt())
        resolver.resolve("backend", 3000)

        assert resolver.is_free(3000) is False
        assert resolver.is_free(3001) is True


class TestValidatePortInput:
    """Tests for the custom port validator."""

    def test_valid(self):
        assert validate_port_input("4000", lambda port: True) is True

    @pytest.mark.parametrize("text", ["abc", "", "0", "65536", "-1"])
    def test_out_of_range(self, text):
        assert "valid port number" in validate_port_input(text, lambda port: True)

    def test_in_use(self):
        assert validate_port_input("3000", lambda port: False) == "This port is already in use"


class TestPortPrompt:
    """Tests for PortPrompt."""

    def test_choose_action_cancel_means_exit(self):
        with patch("questionary.select") as mock_select:
            mock_select.return_value.ask.return_value = None
            assert PortPrompt().choose_action("backend", 3000) == PortAction.EXIT

    def test_ask_port(self):
        with patch("questionary.text") as mock_text:
            mock_text.return_value.ask.return_value = " 4000 "
            assert PortPrompt().ask_port("backend", lambda port: True) == 4000

    def test_ask_port_cancel(self):
        with patch("questionary.text") as mock_text:
            mock_text.return_value.ask.return_value = None
            with pytest.raises(PortResolutionError):
                PortPrompt().ask_port("backend", lambda port: True)


def test_conflict_prompt_answers_auto(fake_scanner, fake_stack, terminal):
    fake_scanner.busy = {3000}
    terminal.send_text("\r")

    assert PortResolver(fake_scanner, fake_stack).resolve("backend", 3000) == 3001


def test_conflict_prompt_custom_port(fake_scanner, fake_stack, terminal):
    fake_scanner.busy = {3000}
    terminal.send_text("\x1b[B\r")  # down to "Specify a custom port"
    terminal.send_text("4000\r")

    assert PortResolver(fake_scanner, fake_stack).resolve("backend", 3000) == 4000
