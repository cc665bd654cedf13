import asyncio

import typer
from rich import print
from rich.markup import escape
from rich.table import Table
from dotenv import load_dotenv

from .categories import ALL, CATEGORIES, color_for
from .form import INVALID_URL_MESSAGE
from .logging_config import setup_logging
from .models import VOTE_OPTIONS
from .server import AppState, make_state
from .settings import Settings

app = typer.Typer(add_completion=False)


def _state() -> AppState:
    load_dotenv()
    st = Settings()
    setup_logging(json_mode=st.log_json, level=st.log_level)
    return make_state(st)


async def _load(state: AppState, category: str) -> None:
    if category == ALL:
        await state.shell.start()
    else:
        await state.shell.set_category(category)


@app.command()
def init_db():
    """Prepare the fact store.

    - INFOBURST_STORE=sqlite: creates the facts table
    - INFOBURST_STORE=supabase|memory: no-op
    """
    try:
        state = _state()
    except RuntimeError as exc:
        print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=2)
    print(f"[green]OK[/green] schema ensured (backend={state.settings.store_backend})")


@app.command()
def categories():
    """List the fact categories and their colours."""
    table = Table("category", "color")
    for cat in CATEGORIES:
        table.add_row(f"[{cat.color}]{cat.name}[/]", cat.color)
    print(table)


@app.command("list")
def list_facts(category: str = typer.Option(ALL, help="Category name, or 'all'.")):
    """Show facts, newest first."""
    state = _state()

    async def run():
        try:
            await _load(state, category)
        finally:
            await state.store.close()

    try:
        asyncio.run(run())
    except ValueError as exc:
        print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)

    alerts = state.shell.drain_alerts()
    if alerts:
        print(f"[red]{alerts[0]}[/red]")
        raise typer.Exit(code=1)

    if not state.shell.facts:
        print("No item in this category yet!. Add the First one 😊")
        return

    table = Table("id", "fact", "category", "❤️", "👍", "⛔️")
    for f in state.shell.facts:
        text = ("[red][⛔️DISPUTED][/red] " if f.disputed else "") + escape(f.text)
        table.add_row(str(f.id), text, f"[{color_for(f.category)}]{f.category}[/]", str(f.votes_love), str(f.votes_interesting), str(f.votes_false))
    print(table)
    print(f"{len(state.shell.facts)} item(s) in this database. Add your own!")


@app.command()
def add(text: str, source: str, category: str):
    """Share a new fact (same validation as the web form)."""
    state = _state()
    form = state.shell.form
    form.set_text(text)
    form.set_source(source)
    form.set_category(category)

    async def run():
        try:
            return await form.submit(state.shell)
        finally:
            await state.store.close()

    fact = asyncio.run(run())
    if fact is None:
        if not form.is_valid_url:
            print(f"[red]{INVALID_URL_MESSAGE}[/red]")
        raise typer.Exit(code=1)
    print(f"[green]OK[/green] fact {fact.id} added to #{fact.category}#")


@app.command()
def vote(fact_id: str, option: str):
    """Vote on a fact: votesLove, votesInteresting or votesFalse."""
    if option not in VOTE_OPTIONS:
        print(f"[red]unknown vote option: {option}[/red]")
        raise typer.Exit(code=2)
    state = _state()

    async def run():
        try:
            await state.shell.start()
            fact = state.shell.find_fact(fact_id)
            if fact is not None and state.votes.get(fact.id).is_chosen(option):
                return fact, False
            return fact, await state.shell.vote(fact_id, option)
        finally:
            await state.store.close()

    try:
        _, updated = asyncio.run(run())
    except KeyError:
        print(f"[red]no fact with id {fact_id}[/red]")
        raise typer.Exit(code=1)

    if updated is False:
        print(f"[yellow]already voted {option} on fact {fact_id}[/yellow]")
        return
    if updated is None:
        print("[yellow]vote not recorded[/yellow]")
        raise typer.Exit(code=1)
    print(f"[green]OK[/green] ❤️ {updated.votes_love}  👍 {updated.votes_interesting}  ⛔️ {updated.votes_false}")


@app.command()
def serve(host: str = "127.0.0.1", port: int = 8099):
    """Run the web app (page at / and JSON API under /api). Requires: pip install -e .[server]"""
    load_dotenv()
    st = Settings()
    setup_logging(json_mode=st.log_json, level=st.log_level)
    import uvicorn
    uvicorn.run("infoburst.server:create_app", factory=True, host=host, port=port, reload=False)


if __name__ == "__main__":
    app()
