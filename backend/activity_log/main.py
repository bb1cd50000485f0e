from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from loguru import logger

from .config import settings
from .errors import (
    ActivityLogError,
    ClipboardUnavailable,
    InvalidLink,
    MissingMainPerson,
    NotFound,
    UnrecognizedText,
)
from .logger import setup_logger
from .parser import LabelSet, get_label_set
from .schemas import (
    ActivityCreateRequest,
    ActivityRecord,
    ActivityUpdateRequest,
    DetailCreateRequest,
    DetailRecord,
    LinkResponse,
    StatsResponse,
    TextPayload,
)
from .services import (
    build_stats,
    export_filename,
    export_markdown,
    paste_activity,
    paste_link,
    suggest_establishments,
    suggest_main_persons,
    write_markdown_export,
)
from .storage import build_storage
from .store import ActivityStore

MARKDOWN_MEDIA_TYPE = "text/markdown; charset=utf-8"

_ERROR_STATUS = {
    NotFound: status.HTTP_404_NOT_FOUND,
    InvalidLink: status.HTTP_400_BAD_REQUEST,
    UnrecognizedText: status.HTTP_422_UNPROCESSABLE_ENTITY,
    MissingMainPerson: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ClipboardUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_store(request: Request) -> ActivityStore:
    return request.app.state.store


def get_labels(request: Request) -> LabelSet:
    return request.app.state.labels


async def _handle_domain_error(request: Request, exc: ActivityLogError) -> JSONResponse:
    code = next(
        (code for error_type, code in _ERROR_STATUS.items() if isinstance(exc, error_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    return JSONResponse({"detail": exc.message}, status_code=code)


setup_logger(level=settings.log_level, log_file=settings.log_file)

app = FastAPI(title=settings.app_name)
app.state.store = ActivityStore(build_storage(settings), key=settings.storage_key)
app.state.labels = get_label_set(settings.parser_labels)
app.add_exception_handler(ActivityLogError, _handle_domain_error)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/activities", response_model=list[ActivityRecord])
def list_activities(store: ActivityStore = Depends(get_store)) -> list[ActivityRecord]:
    return store.list()


@app.get("/activities/{activity_id}", response_model=ActivityRecord)
def get_activity(activity_id: int, store: ActivityStore = Depends(get_store)) -> ActivityRecord:
    return store.get(activity_id)


@app.post("/activities", response_model=ActivityRecord, status_code=status.HTTP_201_CREATED)
def create_activity(payload: ActivityCreateRequest, store: ActivityStore = Depends(get_store)) -> ActivityRecord:
    return store.create(payload)


@app.patch("/activities/{activity_id}", response_model=ActivityRecord)
def update_activity(
    activity_id: int,
    payload: ActivityUpdateRequest,
    store: ActivityStore = Depends(get_store),
) -> ActivityRecord:
    return store.update(activity_id, payload)


@app.delete("/activities/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_activity(activity_id: int, store: ActivityStore = Depends(get_store)) -> Response:
    store.delete(activity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post(
    "/activities/{activity_id}/details",
    response_model=DetailRecord,
    status_code=status.HTTP_201_CREATED,
)
def add_activity_detail(
    activity_id: int,
    payload: DetailCreateRequest,
    store: ActivityStore = Depends(get_store),
) -> DetailRecord:
    return store.add_detail(activity_id, payload)


@app.delete("/activities/{activity_id}/details/{detail_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_activity_detail(
    activity_id: int,
    detail_id: int,
    store: ActivityStore = Depends(get_store),
) -> Response:
    store.delete_detail(activity_id, detail_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post("/activities/paste", response_model=ActivityRecord, status_code=status.HTTP_201_CREATED)
def paste_activity_text(
    payload: TextPayload,
    store: ActivityStore = Depends(get_store),
    labels: LabelSet = Depends(get_labels),
) -> ActivityRecord:
    return paste_activity(store, payload.text, labels)


@app.post("/links/validate", response_model=LinkResponse)
def validate_link(payload: TextPayload) -> LinkResponse:
    return LinkResponse(link=paste_link(payload.text))


@app.get("/stats", response_model=StatsResponse)
def get_stats(store: ActivityStore = Depends(get_store)) -> StatsResponse:
    return build_stats(store)


@app.get("/suggestions/persons", response_model=list[str])
def person_suggestions(q: Optional[str] = None, store: ActivityStore = Depends(get_store)) -> list[str]:
    return suggest_main_persons(store, q)


@app.get("/suggestions/establishments", response_model=list[str])
def establishment_suggestions(q: Optional[str] = None, store: ActivityStore = Depends(get_store)) -> list[str]:
    return suggest_establishments(store, q)


@app.get("/export/markdown")
def get_markdown_export(store: ActivityStore = Depends(get_store)) -> Response:
    return Response(content=export_markdown(store), media_type=MARKDOWN_MEDIA_TYPE)


@app.get("/export/markdown/download")
def download_markdown_export(store: ActivityStore = Depends(get_store)) -> FileResponse:
    today = dt.date.today()
    path = write_markdown_export(store, settings.export_dir, today)
    logger.debug(f"Serving export {path.name}")
    return FileResponse(path, media_type=MARKDOWN_MEDIA_TYPE, filename=export_filename(today))
