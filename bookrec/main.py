from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse
from typing import List
import logging
from dotenv import load_dotenv

from .models import Options, Recommendation, SelectionUpdate, SessionState
from .catalog import load_genres, load_moods, levels, moods_for
from .recommender import RecommendationSession, RequestInProgress, MISSING_FIELDS
from .config import get_settings
from .client import GeminiClient

load_dotenv()
settings = get_settings()
logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Book Recommendation API", version="0.1.0")

# One in-memory session for the lifetime of the process
SESSION = RecommendationSession(books_per_request=settings.books_per_request)


def get_session() -> RecommendationSession:
    return SESSION


def get_client() -> GeminiClient:
    return GeminiClient(get_settings())


@app.on_event("startup")
async def on_startup():
    # fail fast on broken option files
    genres = load_genres()
    load_moods()
    logger.info("Loaded %d genres; Gemini key configured: %s", len(genres), bool(settings.gemini_api_key))


@app.get("/health")
async def health(session: RecommendationSession = Depends(get_session)):
    return {
        "status": "ok",
        "api_key_loaded": bool(get_settings().gemini_api_key),
        "recommendations": len(session.recommendations),
    }


@app.get("/options", response_model=Options)
async def list_options():
    return Options(genres=load_genres(), levels=levels(), moods=load_moods())


@app.get("/options/moods", response_model=List[str])
async def list_moods(genre: str = Query(default="")):
    return moods_for(genre)


@app.get("/session", response_model=SessionState)
async def get_state(session: RecommendationSession = Depends(get_session)):
    return session.snapshot()


@app.patch("/session/selection", response_model=SessionState)
async def update_selection(payload: SelectionUpdate, session: RecommendationSession = Depends(get_session)):
    if payload.genre and payload.genre not in load_genres():
        raise HTTPException(status_code=422, detail=f"Unknown genre: {payload.genre}")
    genre = payload.genre if payload.genre is not None else session.selection.genre
    if payload.mood and payload.mood not in moods_for(genre):
        raise HTTPException(status_code=422, detail=f"Mood {payload.mood!r} is not available for genre {genre!r}")
    if payload.level and payload.level not in levels():
        raise HTTPException(status_code=422, detail=f"Unknown level: {payload.level}")
    session.apply(payload)
    return session.snapshot()


@app.post("/recommendations", response_model=SessionState)
async def create_recommendation(
    session: RecommendationSession = Depends(get_session),
    client: GeminiClient = Depends(get_client),
):
    try:
        recommendation = await session.fetch_recommendations(client)
    except RequestInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    if recommendation is None:
        status = 400 if session.error == MISSING_FIELDS else 502
        raise HTTPException(status_code=status, detail=session.error)
    return session.snapshot()


@app.get("/recommendations", response_model=List[Recommendation])
async def list_recommendations(session: RecommendationSession = Depends(get_session)):
    return session.recommendations


@app.get("/", response_class=HTMLResponse)
async def index():
    return HTMLResponse(content=INDEX_HTML)


INDEX_HTML = """<!doctype html>
<html lang=\"en\">
<head>
  <meta charset=\"utf-8\" />
  <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
  <title>Book Recommendation App</title>
  <style>
    body { margin: 0; font-family: Arial, sans-serif; color: #333; }
    .container { max-width: 800px; margin: 0 auto; padding: 20px; }
    h1 { text-align: center; }
    .form { background: #f5f5f5; padding: 20px; border-radius: 10px; margin-bottom: 20px; }
    section[role=dropdown] { margin-bottom: 12px; }
    select { width: 100%; padding: 10px; font-size: 15px; border-radius: 5px; border: 1px solid #ccc; }
    .btn { width: 100%; padding: 12px; font-size: 16px; font-weight: bold; background: #4CAF50; color: white;
           border: none; border-radius: 5px; cursor: pointer; transition: background-color 0.3s; }
    .btn:disabled { background: #ccc; cursor: not-allowed; }
    .error { margin-top: 10px; padding: 10px; background: #ffebee; color: #c62828; border-radius: 5px; }
    .hidden { display: none; }
    details { margin-bottom: 15px; background: white; padding: 15px; border-radius: 8px; border: 1px solid #ddd;
              box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
    summary { cursor: pointer; font-weight: bold; font-size: 18px; color: #4CAF50; margin-bottom: 10px; }
    .meta { font-size: 12px; color: #666; font-weight: normal; margin-top: 5px; }
    .text { margin-top: 15px; line-height: 1.6; white-space: pre-wrap; }
  </style>
</head>
<body>
  <div class=\"container\">
    <h1>&#128218; Book Recommendation App</h1>

    <div class=\"form\">
      <section role=\"dropdown\"><select id=\"genre\"></select></section>
      <section role=\"dropdown\"><select id=\"mood\"></select></section>
      <section role=\"dropdown\"><select id=\"level\"></select></section>
      <button class=\"btn\" id=\"submit\" onclick=\"onSubmit()\" disabled>Get Recommendations</button>
      <div class=\"error hidden\" id=\"error\"></div>
    </div>

    <div id=\"history\" class=\"hidden\">
      <h2>Your Recommendations</h2>
      <div id=\"recs\"></div>
    </div>
  </div>

  <script>
    const base = '';
    const PLACEHOLDERS = {
      genre: 'Please select a genre', mood: 'Please select a mood', level: 'Please select a level'
    };
    let OPTIONS = { genres: [], levels: [], moods: {} };
    let LOADING = false;

    function populateSelect(id, items, value) {
      const el = document.getElementById(id);
      el.innerHTML = '';
      const ph = document.createElement('option');
      ph.value = ''; ph.textContent = PLACEHOLDERS[id]; el.appendChild(ph);
      for (const it of items) {
        const opt = document.createElement('option');
        opt.value = it; opt.textContent = it; el.appendChild(opt);
      }
      el.value = value || '';
    }

    function showError(msg) {
      const box = document.getElementById('error');
      box.textContent = msg || '';
      box.classList.toggle('hidden', !msg);
    }

    function setButton(state) {
      const btn = document.getElementById('submit');
      btn.disabled = LOADING || !state.can_submit;
      btn.textContent = LOADING ? 'Loading...' : 'Get Recommendations';
    }

    function renderRecs(items) {
      const wrap = document.getElementById('recs');
      wrap.innerHTML = '';
      document.getElementById('history').classList.toggle('hidden', !items.length);
      items.forEach((r, i) => {
        const d = document.createElement('details');
        const s = document.createElement('summary');
        s.textContent = `Recommendation ${i + 1} - ${r.genre} (${r.mood})`;
        const meta = document.createElement('div');
        meta.className = 'meta';
        meta.textContent = `${r.timestamp} \\u2022 ${r.level} level`;
        s.appendChild(meta);
        const body = document.createElement('div');
        body.className = 'text';
        body.textContent = r.text;
        d.appendChild(s); d.appendChild(body);
        wrap.appendChild(d);
      });
    }

    function render(state) {
      const sel = state.selection;
      populateSelect('genre', OPTIONS.genres, sel.genre);
      populateSelect('mood', state.available_moods, sel.mood);
      populateSelect('level', OPTIONS.levels, sel.level);
      LOADING = state.loading;
      setButton(state);
      showError(state.error);
      renderRecs(state.recommendations);
    }

    async function loadState() {
      const state = await fetch(base + '/session').then(r => r.json());
      render(state);
    }

    async function onSelect(field, value) {
      const r = await fetch(base + '/session/selection', {
        method: 'PATCH', headers: { 'Content-Type': 'application/json' },
        body: JSON.stringify({ [field]: value })
      });
      if (!r.ok) {
        const err = await r.json().catch(() => ({}));
        showError(err.detail || 'Could not update selection'); return;
      }
      render(await r.json());
    }

    async function onSubmit() {
      LOADING = true;
      setButton({ can_submit: false });
      showError(null);
      try {
        const r = await fetch(base + '/recommendations', { method: 'POST' });
        if (!r.ok) {
          const err = await r.json().catch(() => ({}));
          await loadState();
          showError(typeof err.detail === 'string' ? err.detail : 'Request failed');
          return;
        }
        render(await r.json());
      } catch (e) {
        LOADING = false;
        showError('Failed to fetch recommendations: ' + e.message);
        await loadState();
      }
    }

    async function bootstrap() {
      OPTIONS = await fetch(base + '/options').then(r => r.json());
      for (const id of ['genre', 'mood', 'level']) {
        document.getElementById(id).addEventListener('change', (e) => onSelect(id, e.target.value));
      }
      await loadState();
    }

    bootstrap();
  </script>
</body>
</html>
"""


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("bookrec.main:app", host="0.0.0.0", port=8000, reload=True)
