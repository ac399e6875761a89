"""
Submissions API Endpoints

Applications and inquiries share one set of routes, keyed by kind.
Reads come from the realtime projections; writes go through the
transition controllers.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request, Response

from modules.export import pdf_filename, render_application_pdf
from modules.submissions import (
    ActionResult,
    ExportError,
    InvalidStatusError,
    Submission,
    SubmissionKind,
    SubmissionNotFound,
    TransitionError,
    filter_submissions,
)

from ..schemas import (
    CountsModel,
    DetailResponse,
    DraftModel,
    ReplyRequest,
    ReplyResponse,
    StatusResponse,
    StatusUpdate,
    SubmissionList,
)

router = APIRouter()

# Notice code → HTTP status for a reply that was not sent
SEND_FAILURE_STATUS = {
    "validation": 400,
    "invalid-recipient": 400,
    "rate-limited": 429,
    "service-unavailable": 503,
    "configuration": 502,
}


def _dashboard(request: Request):
    dashboard = getattr(request.app.state, "dashboard", None)
    if dashboard is None:
        raise HTTPException(status_code=503, detail="Dashboard is starting")
    return dashboard


def serialize(record: Submission) -> dict:
    data = record.model_dump(mode="json", by_alias=True)
    data["kind"] = record.kind.value
    return data


def _detail_response(controller, result: Optional[ActionResult] = None) -> DetailResponse:
    detail = controller.detail
    return DetailResponse(
        submission=serialize(detail.record),
        confirmed=detail.confirmed,
        transitioned=result.transitioned if result else False,
        updating=controller.is_updating(detail.record.id),
        quick_actions=[s.value for s in controller.kind.quick_actions],
        notice=result.notice if result else None,
    )


def _list_response(kind: SubmissionKind, dashboard, q: str = "",
                   availability: str = "all") -> SubmissionList:
    snapshot = dashboard.projections[kind].snapshot
    items = filter_submissions(snapshot.items, search=q, availability=availability)
    return SubmissionList(
        kind=kind.value,
        state=snapshot.state.value,
        error=snapshot.error,
        counts=CountsModel(total=snapshot.counts.total, unread=snapshot.counts.unread),
        matching=len(items),
        updating=sorted(dashboard.controllers[kind].updating),
        items=[serialize(r) for r in items],
        rejected=[r._asdict() for r in snapshot.rejected],
    )


@router.get("/summary")
async def get_summary(request: Request):
    """Unread and total counts across both kinds"""
    summary = _dashboard(request).surface.summary
    return {**summary.model_dump(), "feeds_unavailable": summary.feeds_unavailable}


@router.get("/applications/{submission_id}/pdf")
async def export_application_pdf(submission_id: str, request: Request):
    """Download one application as a PDF"""
    dashboard = _dashboard(request)
    kind = SubmissionKind.APPLICATIONS
    controller = dashboard.controllers[kind]
    try:
        application = await controller.resolve(submission_id, dashboard.projections[kind].snapshot)
    except SubmissionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    try:
        content = render_application_pdf(application, organisation=dashboard.config.organisation)
    except ExportError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_filename(application)}"'},
    )


@router.get("/{kind}", response_model=SubmissionList)
async def list_submissions(kind: SubmissionKind, request: Request,
                           q: str = "", availability: str = "all"):
    """Current view of one kind, newest first"""
    return _list_response(kind, _dashboard(request), q=q, availability=availability)


@router.post("/{kind}/refresh", response_model=SubmissionList)
async def refresh_feed(kind: SubmissionKind, request: Request):
    """Re-subscribe a feed, e.g. after an error"""
    dashboard = _dashboard(request)
    dashboard.projections[kind].retry()
    return _list_response(kind, dashboard)


@router.delete("/{kind}/detail", status_code=204)
async def close_detail(kind: SubmissionKind, request: Request):
    """Close the open detail view"""
    _dashboard(request).controllers[kind].close_detail()
    return Response(status_code=204)


@router.get("/{kind}/{submission_id}", response_model=DetailResponse)
async def open_submission(kind: SubmissionKind, submission_id: str, request: Request):
    """Open one submission; an unread one is marked reviewed"""
    dashboard = _dashboard(request)
    controller = dashboard.controllers[kind]
    try:
        record = await controller.resolve(submission_id, dashboard.projections[kind].snapshot)
    except SubmissionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    result = await controller.open(record)
    return _detail_response(controller, result)


@router.patch("/{kind}/{submission_id}/status", response_model=StatusResponse)
async def update_status(kind: SubmissionKind, submission_id: str,
                        body: StatusUpdate, request: Request):
    """Set a submission's status"""
    controller = _dashboard(request).controllers[kind]
    try:
        status = await controller.transition(submission_id, body.status)
    except InvalidStatusError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except SubmissionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TransitionError as e:
        raise HTTPException(status_code=502, detail=str(e))

    detail = None
    if controller.detail is not None and controller.detail.record.id == submission_id:
        detail = _detail_response(controller)
    return StatusResponse(id=submission_id, status=status.value, detail=detail)


@router.post("/{kind}/{submission_id}/reply", response_model=ReplyResponse)
async def send_reply(kind: SubmissionKind, submission_id: str,
                     body: ReplyRequest, request: Request):
    """Reply to the open submission by email"""
    dashboard = _dashboard(request)
    controller = dashboard.controllers[kind]
    if controller.detail is None or controller.detail.record.id != submission_id:
        raise HTTPException(
            status_code=409,
            detail=f"Open the {kind.label} before replying",
        )

    result = await controller.send_reply(dashboard.mailer, body.subject, body.message)
    composer = controller.detail.composer
    draft = DraftModel(to=composer.to, subject=composer.subject, message=composer.message)

    if result.notice is not None and result.notice.level == "error":
        raise HTTPException(
            status_code=SEND_FAILURE_STATUS.get(result.notice.code, 502),
            detail={"notice": result.notice.model_dump(), "draft": draft.model_dump()},
        )

    return ReplyResponse(
        submission=serialize(controller.detail.record),
        transitioned=result.transitioned,
        notice=result.notice,
        draft=draft,
        receipt=result.receipt.model_dump(mode="json") if result.receipt is not None else None,
    )
