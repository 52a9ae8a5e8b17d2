"""Init command for PapyrusDB CLI - interactive setup that writes the .env file."""

from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from ...auth import generate_server_key

if TYPE_CHECKING:
    import argparse

DEFAULTS = {
    "db_dir": "papyrusdb",
    "db_file": "papyrus-data.json",
    "cors": True,
    "port": 3000,
    "host": "0.0.0.0",
}

BANNER = """
============================================
  PapyrusDB setup
============================================
"""


def _ask(prompt: str, default: str, input_fn: Callable[[str], str]) -> str:
    """Ask a free-text question; empty answer keeps the default."""
    try:
        answer = input_fn(f"  {prompt} [{default}]: ").strip()
    except (EOFError, KeyboardInterrupt):
        return default
    return answer or default


def _confirm(prompt: str, default: bool, input_fn: Callable[[str], str]) -> bool:
    """Ask a yes/no question."""
    suffix = " [Y/n] " if default else " [y/N] "
    try:
        answer = input_fn(f"  {prompt}{suffix}").strip().lower()
    except (EOFError, KeyboardInterrupt):
        return default

    if not answer:
        return default
    return answer in ("y", "yes", "o", "oui")


def validate_port(value: str) -> Optional[int]:
    """Port number in 1-65535, or None."""
    try:
        port = int(value)
    except (TypeError, ValueError):
        return None
    return port if 0 < port <= 65535 else None


def prompt_settings(input_fn: Callable[[str], str] = input) -> dict:
    """Run the questionnaire and return the answers."""
    answers = {
        "db_type": "json",
        "db_dir": _ask("JSON data directory", DEFAULTS["db_dir"], input_fn),
        "db_file": _ask("JSON file name", DEFAULTS["db_file"], input_fn),
        "server_key": _ask(
            "Server API key (leave empty to generate one)", generate_server_key(), input_fn
        ),
        "cors": _confirm("Allow CORS (required by the Papyrus app)?", DEFAULTS["cors"], input_fn),
    }

    while True:
        port = validate_port(_ask("Server port", str(DEFAULTS["port"]), input_fn))
        if port is not None:
            break
        print("  Invalid port number (1-65535)")
    answers["port"] = port

    answers["host"] = _ask("Bind address", DEFAULTS["host"], input_fn)
    return answers


def render_env(answers: dict) -> str:
    """Render answers as PAPYRUS_* environment lines."""
    lines = ["# Generated by `papyrusdb init`. Keep PAPYRUS_SERVER_KEY secret."]
    for key in ("db_type", "db_dir", "db_file", "server_key", "cors", "port", "host"):
        value = answers[key]
        if isinstance(value, bool):
            value = "true" if value else "false"
        lines.append(f"PAPYRUS_{key.upper()}={value}")
    return "\n".join(lines) + "\n"


def write_env(path: Path, answers: dict, force: bool = False) -> Path:
    """Write the .env file; refuses to clobber an existing one unless forced."""
    if path.exists() and not force:
        raise FileExistsError(f"{path} already exists (use --force to overwrite)")
    path.write_text(render_env(answers), encoding="utf-8")
    path.chmod(0o600)
    return path


def cmd_init(args: "argparse.Namespace", input_fn: Callable[[str], str] = input) -> int:
    """Interactive setup: ask for settings and write them to ``args.env_file``."""
    print(BANNER)
    env_path = Path(args.env_file)
    if env_path.exists() and not args.force:
        print(f"✗ {env_path} already exists. Re-run with --force to overwrite it.")
        return 1

    answers = prompt_settings(input_fn)

    try:
        write_env(env_path, answers, force=args.force)
    except OSError as e:
        print(f"✗ Could not write {env_path}: {e}")
        return 1

    print(f"\n✓ Configuration saved to {env_path.resolve()}")
    print("  Start your server with: papyrusdb serve")
    print("  Keep your server key secret: every device uses it to connect.\n")
    return 0
