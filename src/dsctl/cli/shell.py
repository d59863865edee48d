"""Shell profile integration for ``dsctl install``.

Adds click's completion hook and, when an alias is configured, an alias line
to the user's shell rc file. Lines already present are not added again.
"""

import os
from pathlib import Path

SUPPORTED_SHELLS = ("bash", "zsh")
MARKER = "# dsctl setup"
ALIAS_COMPLETION = "_dsctl_alias_completion"


def detect_shell() -> str:
    """Shell name from ``$SHELL``, defaulting to bash."""
    shell = Path(os.environ.get("SHELL", "bash")).name
    return shell if shell in SUPPORTED_SHELLS else "bash"


def rc_file_for(shell: str, home: Path | None = None) -> Path:
    if shell not in SUPPORTED_SHELLS:
        supported = ", ".join(SUPPORTED_SHELLS)
        raise ValueError(f"Unsupported shell '{shell}', expected one of {supported}")
    home = home or Path.home()
    return home / (".zshrc" if shell == "zsh" else ".bashrc")


def install_lines(shell: str, alias: str | None = None) -> list[str]:
    """Lines dsctl needs in the rc file."""
    lines = [f'eval "$(_DSCTL_COMPLETE={shell}_source dsctl)"']
    if alias and alias != "dsctl":
        lines.append(f"alias {alias}=dsctl")
        if shell == "zsh":
            lines.append(f"compdef {alias}=dsctl")
        else:
            # click's bash function runs its first argument, which is the alias here
            lines.append(f'{ALIAS_COMPLETION}() {{ _dsctl_completion dsctl "${{@:2}}"; }}')
            lines.append(f"complete -o nosort -F {ALIAS_COMPLETION} {alias}")
    return lines


def install(rc_path: Path, lines: list[str]) -> list[str]:
    """Append the missing lines to ``rc_path`` under a marker comment.

    Returns:
        The lines that were added (empty when already installed)
    """
    text = rc_path.read_text() if rc_path.exists() else ""
    present = {line.strip() for line in text.splitlines()}
    missing = [line for line in lines if line.strip() not in present]
    if not missing:
        return []

    block = missing if MARKER in present else ["", MARKER, *missing]
    if text and not text.endswith("\n"):
        block.insert(0, "")

    rc_path.parent.mkdir(parents=True, exist_ok=True)
    with open(rc_path, "a") as f:
        f.write("\n".join(block) + "\n")
    return missing
