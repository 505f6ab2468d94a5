"""
Shell completion scripts for stx.

The scripts are static text built from the command tables below, so they
work without the ``stx`` binary being importable at completion time.
"""

from __future__ import annotations

import os
from typing import Optional

SUPPORTED_SHELLS = ("bash", "zsh")

SUBCOMMANDS = {
    "add-server": "Register a Syncthing server",
    "list-servers": "List registered servers",
    "remove-server": "Remove a registered server",
    "pair": "Pair a local folder with a server",
    "status": "Query Syncthing status",
    "errors": "View or clear Syncthing errors",
    "events": "View Syncthing events",
    "completion": "Generate shell completion script",
}

COMMAND_FLAGS: dict[str, list[str]] = {
    "status": ["--server", "--all", "--json"],
    "errors": ["--server", "--all", "--json", "--clear"],
    "events": ["--server", "--types", "--since", "--limit", "--json"],
    "pair": [
        "--server",
        "--folder-id",
        "--label",
        "--local-path",
        "--server-path",
        "--local-url",
        "--server-key",
        "--ssh",
        "--ignore-git",
        "--ignore-template",
    ],
    "add-server": ["--api-key"],
    "list-servers": ["--json"],
    "remove-server": [],
    "completion": [],
}

EVENT_TYPES = (
    "FolderCompletion",
    "FolderSummary",
    "DeviceConnected",
    "DeviceDisconnected",
    "ItemStarted",
    "ItemFinished",
    "StateChanged",
    "ConfigSaved",
)

# Zsh argument specs per flag; flags without a value spec are switches.
_ZSH_FLAG_SPECS = {
    "--server": "'--server[Server name]:name:'",
    "--all": "'--all[Query all servers]'",
    "--json": "'--json[Output as JSON]'",
    "--clear": "'--clear[Clear errors]'",
    "--types": "'--types[Event types]:types:'",
    "--since": "'--since[Event ID to start from]:id:'",
    "--limit": "'--limit[Max events]:n:'",
    "--folder-id": "'--folder-id[Folder ID]:id:'",
    "--label": "'--label[Folder label]:label:'",
    "--local-path": "'--local-path[Local path]:path:_files -/'",
    "--server-path": "'--server-path[Server path]:path:'",
    "--local-url": "'--local-url[Local Syncthing URL]:url:'",
    "--server-key": "'--server-key[Server API key]:key:'",
    "--ssh": "'--ssh[SSH host]:host:'",
    "--ignore-git": "'--ignore-git[Ignore .git directory]'",
    "--ignore-template": "'--ignore-template[Ignore template]:template:(nodepython node python)'",
    "--api-key": "'--api-key[Server API key]:key:'",
}

_ZSH_POSITIONALS = {
    "add-server": ["'1:name:'", "'2:url:'"],
    "remove-server": ["'1:name:'"],
    "completion": ["'1:shell:(bash zsh)'"],
}


def detect_shell() -> Optional[str]:
    """Guess the user's shell from ``$SHELL``; None if unsupported."""
    name = os.path.basename(os.environ.get("SHELL", ""))
    return name if name in SUPPORTED_SHELLS else None


def generate_bash() -> str:
    subcommands = " ".join(SUBCOMMANDS)
    flag_cases = "\n".join(
        f'        {cmd}) COMPREPLY=( $(compgen -W "{" ".join(flags)}" -- "${{cur}}") ) ;;'
        for cmd, flags in COMMAND_FLAGS.items()
        if flags
    )
    event_types = " ".join(EVENT_TYPES)

    return f"""# Bash completion for stx
# Install: stx completion bash >> ~/.bashrc && source ~/.bashrc
# Or: stx completion bash > /etc/bash_completion.d/stx

_stx_completions() {{
    local cur prev words cword
    _init_completion || return

    local subcommands="{subcommands}"

    if [[ ${{cword}} -eq 1 ]]; then
        COMPREPLY=( $(compgen -W "${{subcommands}}" -- "${{cur}}") )
        return
    fi

    local subcmd="${{words[1]}}"

    if [[ "${{cur}}" == -* ]]; then
        case "${{subcmd}}" in
{flag_cases}
            *) COMPREPLY=() ;;
        esac
        return
    fi

    case "${{prev}}" in
        --local-path|--server-path)
            _filedir -d
            ;;
        --ignore-template)
            COMPREPLY=( $(compgen -W "nodepython node python" -- "${{cur}}") )
            ;;
        --types)
            COMPREPLY=( $(compgen -W "{event_types}" -- "${{cur}}") )
            ;;
    esac
}}

complete -F _stx_completions stx
"""


def generate_zsh() -> str:
    described = "\n".join(f"        '{cmd}:{desc}'" for cmd, desc in SUBCOMMANDS.items())

    cases = []
    for cmd, flags in COMMAND_FLAGS.items():
        specs = _ZSH_POSITIONALS.get(cmd, []) + [_ZSH_FLAG_SPECS[f] for f in flags]
        if specs:
            body = " \\\n                        ".join(specs)
            cases.append(f"                {cmd})\n                    _arguments \\\n"
                         f"                        {body}\n                    ;;")
        else:
            cases.append(f"                {cmd})\n                    ;;")
    case_block = "\n".join(cases)

    return f"""#compdef stx
# Zsh completion for stx
# Install: stx completion zsh > ~/.zsh/completions/_stx

_stx() {{
    local -a subcommands
    subcommands=(
{described}
    )

    _arguments -C \\
        '1: :->command' \\
        '*: :->args'

    case $state in
        command)
            _describe -t commands 'stx commands' subcommands
            ;;
        args)
            case $words[2] in
{case_block}
            esac
            ;;
    esac
}}

_stx "$@"
"""


def generate_script(shell: str) -> str:
    """Return the completion script for ``shell``.

    Raises:
        ValueError: If the shell is not supported.
    """
    if shell == "bash":
        return generate_bash()
    if shell == "zsh":
        return generate_zsh()
    raise ValueError(f"Unsupported shell: {shell}. Use 'bash' or 'zsh'.")
