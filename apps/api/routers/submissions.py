"""Public submission intake and admin moderation router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field

from routers.auth_scope import AuthContext, require_admin
from routers.dependencies import get_submission_workflow
from routers.rate_limit import client_identifier
from services.submissions import SubmissionWorkflow

router = APIRouter()


class SubmissionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    section: str = ""
    url: str = ""
    title: Optional[str] = None
    source: Optional[str] = None
    notes: Optional[str] = None
    submitter_email: Optional[str] = Field(default=None, alias="submitterEmail")
    newsletter_signup: bool = Field(default=False, alias="newsletterSignup")
    # Honeypot: hidden in the form, only bots fill it in.
    website: Optional[str] = None


@router.get("/submissions")
async def list_submissions(
    _auth: AuthContext = Depends(require_admin),
    workflow: SubmissionWorkflow = Depends(get_submission_workflow),
):
    return [submission.to_api() for submission in await workflow.list_pending()]


@router.post("/submissions", status_code=201)
async def create_submission(
    payload: SubmissionRequest,
    request: Request,
    workflow: SubmissionWorkflow = Depends(get_submission_workflow),
):
    return await workflow.submit(payload.model_dump(by_alias=True), client_identifier(request))


@router.post("/submissions/{submission_id}/approve")
async def approve_submission(
    submission_id: str,
    _auth: AuthContext = Depends(require_admin),
    workflow: SubmissionWorkflow = Depends(get_submission_workflow),
):
    item = await workflow.approve(submission_id)
    return {"success": True, "item": item.to_api()}


@router.post("/submissions/{submission_id}/dismiss")
async def dismiss_submission(
    submission_id: str,
    _auth: AuthContext = Depends(require_admin),
    workflow: SubmissionWorkflow = Depends(get_submission_workflow),
):
    await workflow.dismiss(submission_id)
    return {"success": True}
