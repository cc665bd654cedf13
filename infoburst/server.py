from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass

import structlog
from fastapi import FastAPI
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from .categories import CATEGORIES
from .models import FactStore
from .settings import Settings
from .shell import AppShell
from .store_memory import MemoryStore
from .store_remote import RemoteStore
from .store_sqlite import SQLiteStore
from .views import render_body, render_page
from .votes import JsonFileKV, MemoryKV, VoteMemory

logger = structlog.get_logger()


@dataclass
class AppState:
    settings: Settings
    store: FactStore
    votes: VoteMemory
    shell: AppShell


def make_store(st: Settings) -> FactStore:
    if st.store_backend == "supabase":
        return RemoteStore(st)
    if st.store_backend == "memory":
        return MemoryStore()
    return SQLiteStore(st)


def make_state(settings: Settings | None = None) -> AppState:
    st = settings or Settings()
    store = make_store(st)
    store.ensure_schema()

    # The memory backend forgets facts on exit; keep its vote records in memory too.
    kv = MemoryKV() if st.store_backend == "memory" else JsonFileKV(st.votes_path)
    votes = VoteMemory(kv)

    shell = AppShell(store=store, votes=votes, list_limit=st.list_limit)
    return AppState(settings=st, store=store, votes=votes, shell=shell)


def _json(state: AppState, content: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={**content, "alerts": state.shell.drain_alerts()})


def create_app(state: AppState | None = None) -> FastAPI:
    state = state or make_state()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("web.startup", backend=state.settings.store_backend)
        await state.shell.start()
        yield
        await state.store.close()
        logger.info("web.shutdown")

    app = FastAPI(title="infoburst", version="0.1.0", lifespan=lifespan)
    app.state.infoburst = state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {
            "ok": True,
            "store_backend": state.settings.store_backend,
            "list_limit": state.settings.list_limit,
        }

    @app.get("/", response_class=HTMLResponse)
    @app.get("/ui", response_class=HTMLResponse)
    async def ui():
        return HTMLResponse(render_page(state.shell))

    @app.get("/ui/body", response_class=HTMLResponse)
    async def ui_body():
        return HTMLResponse(render_body(state.shell))

    @app.get("/api/categories")
    def categories():
        return {"categories": [{"name": c.name, "color": c.color} for c in CATEGORIES]}

    @app.get("/api/state")
    async def app_state():
        return _json(state, state.shell.snapshot())

    @app.post("/api/category")
    async def set_category(body: dict):
        """Switch the category filter and reload the list.

        body: {"category": "all" | "<registry name>"}
        """
        name = body.get("category", "all")
        try:
            await state.shell.set_category(name)
        except ValueError:
            return _json(state, {"error": "unknown_category", "category": name}, status_code=400)
        return _json(state, {"ok": True, "currentCategory": state.shell.current_category, "count": len(state.shell.facts)})

    @app.post("/api/form/toggle")
    async def toggle_form():
        return _json(state, {"ok": True, "showForm": state.shell.toggle_form()})

    @app.post("/api/facts")
    async def create_fact(body: dict):
        """Submit a new fact through the form.

        body: {"text": "...", "source": "https://...", "category": "..."}
        """
        form = state.shell.form
        if form.is_uploading:
            # one shared form; leave the in-flight submission untouched
            return _json(state, {"ok": False, "error": "upload_in_progress"}, status_code=409)
        form.set_text(str(body.get("text", "")))
        form.set_source(str(body.get("source", "")))
        form.set_category(str(body.get("category", "")))

        valid = form.is_valid()
        fact = await form.submit(state.shell)
        if not valid:
            error = "invalid_url" if not form.is_valid_url else "invalid_fact"
            return _json(state, {"ok": False, "error": error}, status_code=422)
        if fact is None:
            return _json(state, {"ok": False, "error": "store_error"}, status_code=502)
        return _json(state, {"ok": True, "fact": {**fact.to_row(), "disputed": fact.disputed}}, status_code=201)

    @app.post("/api/facts/{fact_id}/vote")
    async def vote(fact_id: str, body: dict):
        """Cast or move a vote.

        body: {"option": "votesLove" | "votesInteresting" | "votesFalse"}
        """
        option = body.get("option", "")
        fact = state.shell.find_fact(fact_id)
        if fact is None:
            return _json(state, {"error": "unknown_fact", "id": fact_id}, status_code=404)

        row = state.shell.row(fact)
        if row.is_voting or (option in fact.counters() and row.record(state.shell).is_chosen(option)):
            return _json(state, {"ok": True, "noop": True})
        try:
            updated = await row.vote(option, state.shell)
        except ValueError:
            return _json(state, {"error": "unknown_option", "option": option}, status_code=400)
        if updated is None:
            return _json(state, {"ok": False, "error": "store_error"}, status_code=502)
        return _json(state, {"ok": True, "fact": {**updated.to_row(), "disputed": updated.disputed}})

    return app
