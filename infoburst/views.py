"""HTML rendering of the application state.

Each function returns a fragment; ``render_page`` wraps the body with the
small script that posts actions to the JSON API and redraws ``#app``.
"""

from __future__ import annotations

from html import escape

from .categories import CATEGORIES, color_for
from .form import INVALID_URL_MESSAGE, NewFactForm
from .models import MAX_TEXT_LENGTH, Fact
from .shell import AppShell

APP_TITLE = "Welcome to InfoBurst"
LOADING_MESSAGE = "Loading...."
EMPTY_MESSAGE = "No item in this category yet!. Add the First one 😊"

VOTE_BUTTONS = (
    ("votesLove", "❤️"),
    ("votesInteresting", "👍"),
    ("votesFalse", "⛔️"),
)


def _disabled(flag: bool) -> str:
    return " disabled" if flag else ""


def _js(value) -> str:
    # value embedded in a single-quoted JS string inside a double-quoted attribute
    return escape(str(value).replace("\\", "\\\\").replace("'", "\\'"), quote=True)


def render_header(shell: AppShell) -> str:
    label = "Close" if shell.show_form else "Share!"
    return (
        '<header class="header">'
        f'<div class="logo"><h1>{escape(APP_TITLE)}</h1></div>'
        f'<button class="btn btn-large btn-open" onclick="toggleForm()">{label}</button>'
        "</header>"
    )


def render_loader() -> str:
    return f'<p class="message">{LOADING_MESSAGE}</p>'


def render_form(form: NewFactForm) -> str:
    options = ['<option value="">Choose Category:</option>']
    for cat in CATEGORIES:
        selected = " selected" if cat.name == form.category else ""
        options.append(f'<option value="{escape(cat.name)}"{selected}>{escape(cat.name.upper())}</option>')

    error = ""
    if not form.is_valid_url:
        error = f'<p class="form-error" style="color: red">{escape(INVALID_URL_MESSAGE)}</p>'

    # the text input stays editable while uploading
    return (
        '<form class="fact-form" onsubmit="return submitFact(event)">'
        f'<input id="fact-text" type="text" placeholder="Got interesting information? Share here!..." value="{escape(form.text)}" oninput="updateRemaining(this)" />'
        f'<span id="fact-remaining">{form.remaining}</span>'
        f'<input id="fact-source" type="text" placeholder="Trustworthy Source...." value="{escape(form.source)}" oninput="clearUrlError()"{_disabled(form.is_uploading)} />'
        f"{error}"
        f'<select id="fact-category"{_disabled(form.is_uploading)}>{"".join(options)}</select>'
        f'<button class="btn btn-large"{_disabled(form.is_uploading)}>Post</button>'
        "</form>"
    )


def render_category_filter() -> str:
    items = ['<li class="category"><button class="btn btn-all-categories" onclick="setCategory(\'all\')">All</button></li>']
    for cat in CATEGORIES:
        items.append(
            '<li class="category">'
            f'<button class="btn btn-category" style="background-color: {cat.color}" '
            f"onclick=\"setCategory('{_js(cat.name)}')\">{escape(cat.name)}</button>"
            "</li>"
        )
    return f'<aside><ul>{"".join(items)}</ul></aside>'


def render_fact(shell: AppShell, fact: Fact) -> str:
    row = shell.row(fact)
    disputed = '<span class="disputed"><em>[⛔️DISPUTED] </em></span>' if fact.disputed else ""

    buttons = []
    for option, icon in VOTE_BUTTONS:
        buttons.append(
            f"<button onclick=\"vote('{_js(fact.id)}', '{option}')\"{_disabled(row.button_disabled(shell, option))}>"
            f"{icon} {fact.count(option)}</button>"
        )

    return (
        '<li class="fact">'
        f"<p>{disputed}{escape(fact.text)}"
        f' <a class="source" href="{escape(fact.source)}" target="_blank" rel="noopener">(Source)</a></p>'
        f'<button class="tag" style="background-color: {color_for(fact.category)}" '
        f"onclick=\"setCategory('{_js(fact.category)}')\">#{escape(fact.category)}#</button>"
        f'<div class="vote-buttons">{"".join(buttons)}</div>'
        "</li>"
    )


def render_fact_list(shell: AppShell) -> str:
    if not shell.facts:
        return f'<p class="message">{escape(EMPTY_MESSAGE)}</p>'
    shell.rows_for(shell.facts)
    rows = "".join(render_fact(shell, f) for f in shell.facts)
    return (
        "<section>"
        f'<ul class="facts-list">{rows}</ul>'
        f"<p>{len(shell.facts)} item(s) in this database. Add your own!</p>"
        "</section>"
    )


def render_body(shell: AppShell) -> str:
    form = render_form(shell.form) if shell.show_form else ""
    content = render_loader() if shell.is_loading else render_fact_list(shell)
    return (
        f"{render_header(shell)}{form}"
        f'<main class="main">{render_category_filter()}{content}</main>'
    )


PAGE = """
<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>InfoBurst</title>
  <style>
    body { font-family: system-ui, sans-serif; margin: 0 auto; max-width: 1200px; padding: 16px; }
    .header { display:flex; justify-content: space-between; align-items:center; }
    .main { display:grid; grid-template-columns: 220px 1fr; gap: 32px; }
    aside ul, .facts-list { list-style: none; padding: 0; }
    .category { margin-bottom: 8px; }
    .btn-category, .btn-all-categories, .tag { color: #fff; border: 0; padding: 6px 10px; cursor: pointer; }
    .fact { border-bottom: 1px solid #ddd; padding: 10px 0; }
    .disputed { color: #ef4444; }
    .fact-form { display:flex; gap: 8px; margin: 16px 0; align-items:center; }
    input, select, button { padding: 8px; }
  </style>
</head>
<body>
  <div id="app">__BODY__</div>

<script>
  async function redraw() {
    const html = await fetch('/ui/body').then(r => r.text());
    document.getElementById('app').innerHTML = html;
  }

  async function post(path, body) {
    const out = await fetch(path, {
      method: 'POST',
      headers: { 'content-type': 'application/json' },
      body: JSON.stringify(body || {})
    }).then(r => r.json());
    for (const msg of (out.alerts || [])) alert(msg);
    await redraw();
    return out;
  }

  function setCategory(name) { return post('/api/category', { category: name }); }
  function toggleForm() { return post('/api/form/toggle'); }
  function vote(id, option) { return post(`/api/facts/${encodeURIComponent(id)}/vote`, { option }); }

  function updateRemaining(input) {
    document.getElementById('fact-remaining').textContent = __MAX__ - input.value.length;
  }

  function clearUrlError() {
    const err = document.querySelector('.form-error');
    if (err) err.remove();
  }

  async function submitFact(event) {
    event.preventDefault();
    const text = document.getElementById('fact-text').value;
    const source = document.getElementById('fact-source').value;
    const category = document.getElementById('fact-category').value;
    for (const el of document.querySelectorAll('#fact-source, #fact-category, .fact-form button')) el.disabled = true;
    await post('/api/facts', { text, source, category });
    return false;
  }
</script>
</body>
</html>
"""


def render_page(shell: AppShell) -> str:
    return PAGE.replace("__MAX__", str(MAX_TEXT_LENGTH)).replace("__BODY__", render_body(shell))
