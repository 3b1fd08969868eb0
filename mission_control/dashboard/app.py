#!/usr/bin/env python3
"""Mission Control -- FastAPI dashboard for projects, agent activity, scheduled tasks and search.

Run with:
    python3 -m uvicorn mission_control.dashboard.app:app --host 127.0.0.1 --port 3000
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.responses import HTMLResponse

from mission_control.common.config import setup_logging
from mission_control.dashboard.routes import get_config, router as api_router

logger = logging.getLogger("mission_control.dashboard")

app = FastAPI(title="Mission Control", version="1.0.0")
app.include_router(api_router)


DASHBOARD_HTML = r"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Mission Control</title>
<style>
:root{--bg:#09090b;--panel:#18181b;--border:#27272a;--text:#e4e4e7;--muted:#a1a1aa;--accent:#6c7cff;--ok:#4ade80;--warn:#facc15;--bad:#f87171}
*{box-sizing:border-box}
body{margin:0;font-family:-apple-system,BlinkMacSystemFont,"Segoe UI",sans-serif;background:var(--bg);color:var(--text)}
header{display:flex;align-items:center;gap:24px;padding:16px 24px;border-bottom:1px solid var(--border)}
header h1{font-size:1.1rem;margin:0}
nav button{background:none;border:0;color:var(--muted);padding:8px 12px;cursor:pointer;border-radius:6px;font-size:.9rem}
nav button.active{background:var(--panel);color:var(--text)}
main{padding:24px;max-width:1200px;margin:0 auto}
.tab{display:none}.tab.active{display:block}
.grid{display:grid;grid-template-columns:repeat(auto-fill,minmax(260px,1fr));gap:16px}
.card{background:var(--panel);border:1px solid var(--border);border-radius:10px;padding:16px}
.card h3{margin:0 0 6px;font-size:1rem}
.muted{color:var(--muted);font-size:.82rem}
.bar{height:6px;background:var(--border);border-radius:3px;overflow:hidden;margin:8px 0}
.bar span{display:block;height:100%;background:var(--accent)}
.stat{font-size:1.6rem;font-weight:600}
.row{display:flex;gap:12px;align-items:flex-start;padding:10px 0;border-bottom:1px solid var(--border)}
.pill{font-size:.72rem;padding:2px 8px;border-radius:10px;background:var(--border);color:var(--muted)}
.completed{color:var(--ok)}.running{color:var(--warn)}.failed{color:var(--bad)}
.week{display:grid;grid-template-columns:repeat(7,1fr);gap:8px}
.day{background:var(--panel);border:1px solid var(--border);border-radius:8px;padding:8px;min-height:160px}
.day .ev{font-size:.78rem;background:#1e1b4b;border-radius:4px;padding:4px;margin-top:6px}
input[type=search]{width:100%;padding:10px 12px;background:var(--panel);border:1px solid var(--border);border-radius:8px;color:var(--text);font-size:1rem}
.error{color:var(--bad)}
.error button,.toolbar button{margin-left:8px;background:var(--panel);color:var(--text);border:1px solid var(--border);border-radius:6px;padding:4px 10px;cursor:pointer}
.toolbar{display:flex;align-items:center;gap:8px;margin-bottom:16px}
</style>
</head>
<body>
<header>
  <h1>Mission Control</h1>
  <nav>
    <button class="active" data-tab="overview">Overview</button>
    <button data-tab="activity">Activity</button>
    <button data-tab="calendar">Calendar</button>
    <button data-tab="search">Search</button>
  </nav>
</header>
<main>
  <section id="overview" class="tab active"></section>
  <section id="activity" class="tab"></section>
  <section id="calendar" class="tab"></section>
  <section id="search" class="tab">
    <input type="search" id="q" placeholder="Search documents, memories, activities, tasks..." autocomplete="off">
    <div id="results" style="margin-top:16px"></div>
  </section>
</main>
<script>
const POLL_MS = __POLL_MS__;
const DAY_MS = 24 * 60 * 60 * 1000;
const DAYS = ['Mon','Tue','Wed','Thu','Fri','Sat','Sun'];

const esc = s => String(s ?? '').replace(/[&<>"']/g, c => ({'&':'&amp;','<':'&lt;','>':'&gt;','"':'&quot;',"'":'&#39;'}[c]));

function showError(el, msg, retry) {
  el.innerHTML = `<p class="error">${esc(msg)}<button>Retry</button></p>`;
  el.querySelector('button').onclick = retry;
}

async function getJSON(url) {
  const res = await fetch(url);
  if (!res.ok) throw new Error(`Request failed (${res.status})`);
  return res.json();
}

function ago(ts) {
  const diff = Date.now() - ts;
  if (diff < 3600e3) { const m = Math.floor(diff / 60e3); return m === 0 ? 'Just now' : `${m}m ago`; }
  if (diff < DAY_MS) return `${Math.floor(diff / 3600e3)}h ago`;
  if (diff < 7 * DAY_MS) return `${Math.floor(diff / DAY_MS)}d ago`;
  return new Date(ts).toLocaleDateString('en-US', {month: 'short', day: 'numeric'});
}

/* ═══ Overview ═══ */
async function loadOverview() {
  const el = document.getElementById('overview');
  try {
    const d = await getJSON('/api/overview');
    const s = d.summary;
    el.innerHTML = `
      <div class="grid">
        <div class="card"><div class="muted">Active projects</div><div class="stat">${s.activeProjects} / ${s.totalProjects}</div></div>
        <div class="card"><div class="muted">Research ideas</div><div class="stat">${s.totalResearchIdeas}</div><div class="muted">top score ${s.topResearchScore ?? '-'}</div></div>
        <div class="card"><div class="muted">Activities</div><div class="stat">${s.activitiesCompleted}</div><div class="muted">${s.activitiesRunning} running, ${s.activitiesFailed} failed</div></div>
      </div>
      <h2>Projects</h2>
      <div class="grid">${d.projects.map(p => `
        <div class="card"><h3>${esc(p.name)} <span class="pill">${esc(p.status)}</span></h3>
          <div class="muted">${esc(p.description)}</div>
          <div class="bar"><span style="width:${Number(p.progress) || 0}%"></span></div>
          ${(p.metrics || []).map(m => `<div class="muted">${esc(m.label)}: <b>${esc(m.value)}</b></div>`).join('')}
          <ul>${(p.nextActions || []).map(a => `<li class="muted">${esc(a)}</li>`).join('')}</ul>
        </div>`).join('')}</div>
      <h2>Research ranking</h2>
      ${d.research.map((r, i) => `
        <div class="row"><div class="stat">${i + 1}</div><div><b>${esc(r.title)}</b> <span class="pill">${esc(r.status)}</span>
          <div class="muted">score ${esc(r.score)} · ${esc(r.validation)} · ${esc(r.marketSize)} · ${esc(r.timeToRevenue)}</div></div></div>`).join('')}
      <h2>Quick links</h2>
      ${d.quickLinks.map(l => `<div class="row"><a href="${esc(l.url)}" style="color:var(--accent)">${esc(l.label)}</a></div>`).join('')}`;
  } catch (e) {
    showError(el, e.message, loadOverview);
  }
}

/* ═══ Activity ═══ */
async function loadActivity() {
  const el = document.getElementById('activity');
  try {
    const d = await getJSON('/api/activities?limit=100');
    const s = d.stats;
    el.innerHTML = `
      <div class="toolbar"><span class="muted">Today <b>${s.today}</b> · This week <b>${s.thisWeek}</b> · Total <b>${s.total}</b></span><button id="act-refresh">Refresh</button></div>
      <div class="muted">${Object.entries(s.byProject).map(([k, v]) => `${esc(k)}: ${v}`).join(' · ')}</div>
      ${d.activities.length === 0 ? '<p class="muted">No activity yet.</p>' : d.activities.map(a => `
        <div class="row"><span class="${esc(a.status)}">●</span><div style="flex:1"><b>${esc(a.title)}</b>
          <span class="pill">${esc(a.type)}</span> <span class="pill">${esc(a.category)}</span>${a.project ? ` <span class="pill">${esc(a.project)}</span>` : ''}
          ${a.description ? `<div class="muted">${esc(a.description)}</div>` : ''}</div><span class="muted">${ago(a.timestamp)}</span></div>`).join('')}`;
    document.getElementById('act-refresh').onclick = loadActivity;
  } catch (e) {
    showError(el, e.message, loadActivity);
  }
}

/* ═══ Calendar ═══ */
let weekOffset = 0;

function weekStart(date) {
  const d = new Date(date);
  const day = d.getDay();
  d.setDate(d.getDate() - day + (day === 0 ? -6 : 1));
  d.setHours(0, 0, 0, 0);
  return d;
}

async function loadCalendar() {
  const el = document.getElementById('calendar');
  const start = new Date(weekStart(new Date()).getTime() + weekOffset * 7 * DAY_MS);
  try {
    const week = await getJSON(`/api/tasks?weekStartMs=${start.getTime()}`);
    const byDay = {};
    for (const {task, occurrences} of week) {
      for (const t of occurrences) {
        const i = Math.floor((t - start.getTime()) / DAY_MS);
        if (i >= 0 && i < 7) (byDay[i] = byDay[i] || []).push({task, t});
      }
    }
    el.innerHTML = `
      <div class="toolbar"><button id="prev">‹</button><button id="next">›</button>
        <b>${start.toLocaleDateString('en-US', {month: 'short', day: 'numeric', year: 'numeric'})}</b><button id="cal-refresh">Refresh</button></div>
      <div class="week">${DAYS.map((name, i) => {
        const date = new Date(start.getTime() + i * DAY_MS);
        const items = (byDay[i] || []).sort((a, b) => a.t - b.t);
        return `<div class="day"><div class="muted">${name} ${date.getDate()}</div>${items.map(({task, t}) => `
          <div class="ev"><b>${new Date(t).toLocaleTimeString('en-US', {hour: 'numeric', minute: '2-digit'})}</b> ${esc(task.name)}</div>`).join('')}</div>`;
      }).join('')}</div>`;
    document.getElementById('prev').onclick = () => { weekOffset--; loadCalendar(); };
    document.getElementById('next').onclick = () => { weekOffset++; loadCalendar(); };
    document.getElementById('cal-refresh').onclick = loadCalendar;
  } catch (e) {
    showError(el, e.message, loadCalendar);
  }
}

/* ═══ Search ═══ */
let searchTimer = null;

async function runSearch() {
  const q = document.getElementById('q').value.trim();
  const el = document.getElementById('results');
  if (q.length < 2) { el.innerHTML = ''; return; }
  try {
    const d = await getJSON(`/api/search?q=${encodeURIComponent(q)}&limit=30`);
    const groups = [['Documents', d.documents], ['Memories', d.memories], ['Activities', d.activities], ['Tasks', d.tasks]];
    const total = groups.reduce((n, [, items]) => n + items.length, 0);
    el.innerHTML = total === 0 ? '<p class="muted">No results.</p>' : groups.filter(([, items]) => items.length).map(([label, items]) => `
      <h3>${label} <span class="pill">${items.length}</span></h3>
      ${items.map(r => `<div class="row"><div><b>${esc(r.title)}</b>${r.project ? ` <span class="pill">${esc(r.project)}</span>` : ''}
        ${r.path ? `<div class="muted">${esc(r.path)}</div>` : ''}<div class="muted">${esc(r.content)}</div></div></div>`).join('')}`).join('');
  } catch (e) {
    showError(el, e.message, runSearch);
  }
}

document.getElementById('q').addEventListener('input', () => {
  clearTimeout(searchTimer);
  searchTimer = setTimeout(runSearch, 300);
});

document.querySelectorAll('nav button').forEach(btn => btn.addEventListener('click', () => {
  document.querySelectorAll('nav button').forEach(b => b.classList.toggle('active', b === btn));
  document.querySelectorAll('.tab').forEach(t => t.classList.toggle('active', t.id === btn.dataset.tab));
}));

/* ═══ Init ═══ */
loadOverview();
loadActivity();
loadCalendar();
setInterval(() => { loadOverview(); loadActivity(); }, POLL_MS);
</script>
</body>
</html>"""


@app.get("/", response_class=HTMLResponse)
async def dashboard() -> HTMLResponse:
    poll_seconds = get_config()["dashboard"]["poll_interval_seconds"]
    return HTMLResponse(DASHBOARD_HTML.replace("__POLL_MS__", str(int(poll_seconds * 1000))))


# ── Entrypoint ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    cfg = get_config()
    setup_logging(cfg)
    uvicorn.run(
        "mission_control.dashboard.app:app",
        host=cfg["dashboard"]["host"],
        port=int(cfg["dashboard"]["port"]),
        reload=False,
        log_level="info",
    )
