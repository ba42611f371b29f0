"""
REST endpoints generated for each registered collection.

Mounted under ``{api_route}/{slug}``:

GET    /                  find (``limit``, ``page``, ``sort``, ``where[...]``)
POST   /                  create
PATCH  /                  update every document matching ``where[...]``
DELETE /                  delete every document matching ``where[...]``
GET    /{doc_id}          findByID
PATCH  /{doc_id}          update
DELETE /{doc_id}          delete

Auth-enabled collections also get:

POST   /login             login
POST   /forgot-password   forgotPassword
POST   /reset-password    resetPassword

``where`` uses bracket notation, e.g. ``where[views][greater_than]=10`` or
``where[or][0][and][0][title][like]=post``; see operations/query.py for the
operators. Routers are built from configs at app creation; the Collection
(config + store) is resolved from the registry on each request.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request
from starlette.datastructures import QueryParams

from config import AppSettings
from dependencies import get_request_context
from errors import ValidationError
from operations import crud
from operations.args import OperationArgs
from operations.auth.forgot_password import forgot_password
from operations.auth.login import login
from operations.auth.reset_password import reset_password
from schemas.collection import CollectionConfig
from schemas.dto.requests.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
)
from schemas.dto.responses.auth import (
    ForgotPasswordResponse,
    LoginResponse,
    ResetPasswordResponse,
)
from schemas.dto.responses.common import BulkDocsResponse, DocResponse, PaginatedDocs
from services.context import RequestContext

_SEGMENT = re.compile(r"\[([^\[\]]+)\]")


def _listify(node: Any) -> Any:
    """Turn dicts keyed ``0``, ``1``, ... into lists, recursively."""
    if not isinstance(node, dict):
        return node
    converted = {key: _listify(value) for key, value in node.items()}
    if converted and all(key.isdigit() for key in converted):
        return [converted[key] for key in sorted(converted, key=int)]
    return converted


def parse_where(params: QueryParams, req: RequestContext) -> dict[str, Any]:
    """Rebuild the nested ``where`` dict from bracket-notation query params.

    Any ``where`` key that is not well-formed bracket notation is rejected.
    """
    where: dict[str, Any] = {}
    for key, value in params.multi_items():
        if key != "where" and not key.startswith("where["):
            continue
        rest = key[len("where"):]
        path = _SEGMENT.findall(rest)
        if not path or _SEGMENT.sub("", rest):
            raise ValidationError(
                req.t("error:invalidWhere"), field="where", details={"key": key}
            )
        node = where
        for part in path[:-1]:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                raise ValidationError(
                    req.t("error:invalidWhere"), field="where", details={"key": key}
                )
        if isinstance(node.get(path[-1]), dict):
            raise ValidationError(
                req.t("error:invalidWhere"), field="where", details={"key": key}
            )
        node[path[-1]] = value
    return _listify(where)


def _optional_int(params: QueryParams, name: str) -> Optional[int]:
    raw = params.get(name)
    if raw is None or not raw.lstrip("-").isdigit():
        return None
    return int(raw)


def build_collection_router(
    config: CollectionConfig, settings: AppSettings
) -> APIRouter:
    slug = config.slug
    router = APIRouter(prefix=f"{settings.api_route}/{slug}", tags=[slug])

    def args_for(ctx: RequestContext, **kwargs: Any) -> OperationArgs:
        return OperationArgs(collection=ctx.registry.get(slug), req=ctx, **kwargs)

    if config.is_auth:

        @router.post("/login", response_model=LoginResponse)
        async def login_route(
            body: LoginRequest,
            ctx: RequestContext = Depends(get_request_context),
        ) -> LoginResponse:
            result = await login(
                args_for(ctx, data=body.model_dump(exclude_unset=True))
            )
            return LoginResponse(
                message=ctx.t("authentication:successfullyLoggedIn"), **result
            )

        @router.post(
            "/forgot-password",
            response_model=ForgotPasswordResponse,
            response_model_exclude_none=True,
        )
        async def forgot_password_route(
            body: ForgotPasswordRequest,
            ctx: RequestContext = Depends(get_request_context),
        ) -> ForgotPasswordResponse:
            expose = ctx.settings.auth.expose_reset_token
            disable_email = expose and body.disable_email
            token = await forgot_password(
                args_for(ctx, data=body.to_data(), disable_email=disable_email)
            )
            return ForgotPasswordResponse(
                message=ctx.t("general:success"),
                token=token if disable_email else None,
            )

        @router.post("/reset-password", response_model=ResetPasswordResponse)
        async def reset_password_route(
            body: ResetPasswordRequest,
            ctx: RequestContext = Depends(get_request_context),
        ) -> ResetPasswordResponse:
            result = await reset_password(
                args_for(ctx, data=body.model_dump(exclude_unset=True))
            )
            return ResetPasswordResponse(
                message=ctx.t("authentication:passwordResetSuccessfully"), **result
            )

    @router.get("", response_model=PaginatedDocs, response_model_by_alias=True)
    async def find_route(
        request: Request,
        ctx: RequestContext = Depends(get_request_context),
    ) -> dict:
        params = request.query_params
        return await crud.find(
            args_for(
                ctx,
                where=parse_where(params, ctx),
                sort=params.get("sort"),
                limit=_optional_int(params, "limit"),
                page=_optional_int(params, "page") or 1,
            )
        )

    @router.post("", response_model=DocResponse, status_code=201)
    async def create_route(
        data: dict[str, Any] = Body(...),
        ctx: RequestContext = Depends(get_request_context),
    ) -> DocResponse:
        doc = await crud.create(args_for(ctx, data=data))
        return DocResponse(message=ctx.t("general:successfullyCreated"), doc=doc)

    @router.patch("", response_model=BulkDocsResponse)
    async def bulk_update_route(
        request: Request,
        data: dict[str, Any] = Body(...),
        ctx: RequestContext = Depends(get_request_context),
    ) -> BulkDocsResponse:
        params = request.query_params
        result = await crud.update(
            args_for(
                ctx, data=data, where=parse_where(params, ctx), sort=params.get("sort")
            )
        )
        return BulkDocsResponse(message=ctx.t("general:updatedSuccessfully"), **result)

    @router.delete("", response_model=BulkDocsResponse)
    async def bulk_delete_route(
        request: Request,
        ctx: RequestContext = Depends(get_request_context),
    ) -> BulkDocsResponse:
        params = request.query_params
        result = await crud.delete(
            args_for(ctx, where=parse_where(params, ctx), sort=params.get("sort"))
        )
        return BulkDocsResponse(message=ctx.t("general:deletedSuccessfully"), **result)

    @router.get("/{doc_id}")
    async def find_by_id_route(
        doc_id: str,
        ctx: RequestContext = Depends(get_request_context),
    ) -> dict:
        return await crud.find_by_id(args_for(ctx, id=doc_id))

    @router.patch("/{doc_id}", response_model=DocResponse)
    async def update_route(
        doc_id: str,
        data: dict[str, Any] = Body(...),
        ctx: RequestContext = Depends(get_request_context),
    ) -> DocResponse:
        doc = await crud.update_by_id(args_for(ctx, id=doc_id, data=data))
        return DocResponse(message=ctx.t("general:updatedSuccessfully"), doc=doc)

    @router.delete("/{doc_id}", response_model=DocResponse)
    async def delete_route(
        doc_id: str,
        ctx: RequestContext = Depends(get_request_context),
    ) -> DocResponse:
        doc = await crud.delete_by_id(args_for(ctx, id=doc_id))
        return DocResponse(message=ctx.t("general:deletedSuccessfully"), doc=doc)

    return router
