import uvicorn
import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from dataclasses import asdict
from typing import Any, Dict

from fastapi import Body, Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from radiofeed import config as options
from radiofeed.database import SettingsStore
from radiofeed.errors import DecodeError, NetworkError, UnsupportedOperation
from radiofeed.feed import Catalog, CategoryEntry, FeedLoad, FeedState, StationEntry
from radiofeed.models import PlayableSource, StreamDescriptor
from radiofeed.parsers.radio_browser import RadioBrowserClient

logger = logging.getLogger(__name__)

async def run_first_run_seed(store: SettingsStore, client: RadioBrowserClient):
    try:
        await options.seed_first_run(store, client)
    except (NetworkError, DecodeError) as e:
        # Next start tries again; the snapshot only feeds the settings page.
        logger.warning("First run seed failed: %s", e)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing radio catalog...")
    if not hasattr(app.state, "store"):
        app.state.store = SettingsStore()
    if not hasattr(app.state, "client"):
        app.state.client = RadioBrowserClient()
    task = asyncio.create_task(run_first_run_seed(app.state.store, app.state.client))
    yield
    task.cancel()
    with suppress(asyncio.CancelledError):
        await task

app = FastAPI(lifespan=lifespan)

def get_catalog(request: Request) -> Catalog:
    return Catalog(request.app.state.client, request.app.state.store)

@app.exception_handler(NetworkError)
@app.exception_handler(DecodeError)
async def upstream_failed(request: Request, exc: Exception):
    return JSONResponse(status_code=502, content={"detail": str(exc), "url": exc.url})

@app.exception_handler(UnsupportedOperation)
async def not_supported(request: Request, exc: UnsupportedOperation):
    return JSONResponse(status_code=501, content={"detail": str(exc)})

def _entry(entry) -> Dict[str, Any]:
    if isinstance(entry, CategoryEntry):
        return {"type": "category", "key": entry.key, "title": entry.title, "count": entry.count}
    if isinstance(entry, StationEntry):
        return {"type": "station", **asdict(entry), "source": entry.source.model_dump(mode="json")}
    return {"type": "country", **asdict(entry)}

async def _page(load: FeedLoad):
    await load.run()
    if load.state is FeedState.FAILED:
        raise load.error
    return [_entry(e) for e in load.data.load_page().items]

@app.get("/api/countries")
async def countries(catalog: Catalog = Depends(get_catalog)):
    return await _page(catalog.home_feed())

@app.get("/api/countries/{code}")
async def country(code: str, catalog: Catalog = Depends(get_catalog)):
    return await _page(catalog.country_feed(code))

@app.get("/api/countries/{code}/categories/{key}")
async def category(code: str, key: str, catalog: Catalog = Depends(get_catalog)):
    return await _page(catalog.category_page(code, key))

@app.get("/api/search")
async def search(q: str = Query(...), catalog: Catalog = Depends(get_catalog)):
    return await _page(catalog.search_feed(q))

@app.post("/api/stream", response_model=PlayableSource)
async def stream(source: StreamDescriptor, catalog: Catalog = Depends(get_catalog)):
    return await catalog.load_stream(source)

@app.get("/api/radio/{item_type}/{item_id}")
async def radio(item_type: str, item_id: str, catalog: Catalog = Depends(get_catalog)):
    return asdict(await catalog.radio(item_type, item_id))

@app.get("/api/settings")
async def settings(catalog: Catalog = Depends(get_catalog)):
    return options.setting_items(catalog.config(), catalog.store)

@app.put("/api/settings/{key}")
async def update_settings(key: str, value: Any = Body(..., embed=True), catalog: Catalog = Depends(get_catalog)):
    try:
        options.update_setting(catalog.store, key, value)
    except (KeyError, ValueError) as e:
        return JSONResponse(status_code=422, content={"detail": f"Invalid setting {key}: {e}"})
    return options.setting_items(catalog.config(), catalog.store)

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    uvicorn.run("radiofeed.main:app", host="0.0.0.0", port=8000, reload=True)
