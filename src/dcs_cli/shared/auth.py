"""Registry token handling.

The token is resolved once (flag > environment > prompt) and then carried
in RegistryConfig; it is never written back into os.environ.
"""

import os

import questionary

TOKEN_ENV_VAR = "DOCKER_TOKEN"


def get_token(token_arg: str | None = None, env_var: str = TOKEN_ENV_VAR) -> str | None:
    """Resolve token from: CLI arg > env var.

    Args:
        token_arg: Token passed via --token
        env_var: Environment variable name to check

    Returns:
        Token string if found, None otherwise
    """
    if token_arg:
        return token_arg.strip()

    value = os.environ.get(env_var, "").strip()
    return value or None


def prompt_token() -> str:
    """Ask for the registry token without echoing it.

    Raises:
        KeyboardInterrupt: If the operator cancels the prompt
    """
    token = questionary.password(
        "Enter your Docker Hub token:",
        validate=lambda text: True if text.strip() else "Docker token cannot be empty",
    ).ask()

    if token is None:
        raise KeyboardInterrupt("Token prompt cancelled")
    return token.strip()


def export_suggestions(token: str, shell: str | None = None, env_var: str = TOKEN_ENV_VAR) -> list[str]:
    """Build the lines an operator can paste to keep the token around.

    Nothing is executed; the suggestion only depends on $SHELL.

    Args:
        token: Token to export
        shell: Shell path, defaults to $SHELL (or bash)
        env_var: Variable name to export

    Returns:
        The export line, followed by an rc-file append command when the
        shell is zsh or bash
    """
    shell = shell if shell is not None else os.environ.get("SHELL", "bash")
    export_cmd = f"export {env_var}={token}"
    lines = [export_cmd]

    if "zsh" in shell:
        lines.append(f"echo '{export_cmd}' >> ~/.zshrc")
    elif "bash" in shell:
        lines.append(f"echo '{export_cmd}' >> ~/.bashrc")

    return lines


def auth_headers(token: str | None) -> dict[str, str]:
    """Build Authorization header dict (empty when there is no token)."""
    if token:
        return {"Authorization": f"Bearer {token}"}
    return {}
