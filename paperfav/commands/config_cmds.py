from __future__ import annotations

from rich import print
from rich.markup import escape


def configure_cmd(
    *,
    read_config,
    write_config,
    updates: dict[str, object | None],
) -> None:
    data = read_config()
    changed = {key: value for key, value in updates.items() if value is not None}
    if not changed:
        print("[yellow]Nothing to change[/yellow]")
    else:
        data.update(changed)
        config_path = write_config(data)
        print(f"[green]Config updated[/green] ({escape(str(config_path))})")
    for key in ("repo_owner", "repo_name", "data_branch", "api_base_url"):
        value = data.get(key)
        print(f"- {key}: {escape(str(value)) if value else '(default)'}")
