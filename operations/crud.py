"""
Generic collection operations: find, findByID, create, update and delete,
plus bulk update and delete over a ``where`` selection.

Each operation runs before_operation hooks first and after_operation hooks
last. The collection's access function for the action runs next; it may
deny the request or narrow the documents the operation can touch. Writes
run before_change (may replace ``data``) and after_change; every document
returned passes through after_read (may replace ``doc``).

Auth-enabled collections additionally lower-case ``email``, enforce its
uniqueness and turn a supplied ``password`` into an argon2 ``hash``.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from errors import AppError, ConflictError, ForbiddenError, NotFoundError, ValidationError
from hooks.runner import (
    call_hook,
    run_after_operation,
    run_before_operation,
    run_hooks,
    run_threaded,
)
from operations.args import OperationArgs
from operations.query import build_filter, combine_filters, parse_sort
from shared.crypto import hash_password
from shared.datetime_utils import bson_now
from shared.logging import get_logger

log = get_logger(__name__)

# Keys a client can never write directly
PROTECTED_KEYS = frozenset(
    {
        "_id",
        "id",
        "hash",
        "resetPasswordToken",
        "resetPasswordExpiration",
        "loginAttempts",
        "lockUntil",
        "createdAt",
        "updatedAt",
    }
)


def parse_object_id(doc_id: Optional[str], req) -> ObjectId:
    if doc_id is None or not ObjectId.is_valid(doc_id):
        raise NotFoundError(req.t("error:notFound"))
    return ObjectId(doc_id)


async def check_access(args: OperationArgs, action: str) -> dict[str, Any]:
    """Run the collection's access function for *action*.

    Returns an extra MongoDB filter (empty when unrestricted) or raises
    ForbiddenError when access is denied.
    """
    access_fn = getattr(args.collection.config.access, action)
    if access_fn is None:
        return {}
    result = await call_hook(access_fn, req=args.req, id=args.id, data=args.data)
    if not result:
        log.info(
            "access_denied",
            collection=args.collection.slug,
            action=action,
            user_id=(args.req.user or {}).get("sub"),
        )
        raise ForbiddenError(args.req.t("error:notAllowed"))
    if isinstance(result, dict) and action != "create":
        return build_filter(result, args.req)
    return {}


async def _after_read(args: OperationArgs, doc: dict) -> dict:
    return await run_threaded(
        args.collection.config.hooks.after_read, "doc", doc, req=args.req
    )


async def _prepare_data(
    args: OperationArgs,
    operation: str,
    original: Optional[dict] = None,
) -> dict[str, Any]:
    """Strip protected keys, run before_change, apply auth field rules."""
    collection = args.collection
    req = args.req
    data = {k: v for k, v in args.data.items() if k not in PROTECTED_KEYS}

    data = await run_threaded(
        collection.config.hooks.before_change,
        "data",
        data,
        req=req,
        operation=operation,
        original_doc=collection.store.to_json(original) if original else None,
    )

    if not collection.config.is_auth:
        return data

    if operation == "create" or "email" in data:
        email = data.get("email")
        if not email:
            raise ValidationError(req.t("error:missingEmail"), field="email")
        data["email"] = str(email).lower()
        existing = await collection.store.find_one({"email": data["email"]})
        if existing is not None and (original is None or existing["_id"] != original["_id"]):
            raise ConflictError(req.t("error:userEmailAlreadyRegistered"), field="email")

    password = data.pop("password", None)
    if password:
        data["hash"] = hash_password(password)
    elif operation == "create":
        raise ValidationError(req.t("error:missingPassword"), field="password")

    return data


async def _update_one(args: OperationArgs, original: dict) -> dict[str, Any]:
    collection = args.collection
    req = args.req

    data = await _prepare_data(args, "update", original)
    merged = {**original, **data, "_id": original["_id"], "updatedAt": bson_now()}

    try:
        raw = await collection.store.save(merged)
    except DuplicateKeyError as e:
        raise ConflictError(req.t("error:userEmailAlreadyRegistered"), field="email") from e

    doc = collection.store.to_json(raw)
    log.info("document_updated", collection=collection.slug, doc_id=doc["id"])

    await run_hooks(
        collection.config.hooks.after_change,
        doc=doc,
        previous_doc=collection.store.to_json(original),
        operation="update",
        req=req,
    )
    return await _after_read(args, doc)


async def _delete_one(args: OperationArgs, query: dict[str, Any]) -> Optional[dict]:
    collection = args.collection
    raw = await collection.store.delete(query)
    if raw is None:
        return None

    doc = collection.store.to_json(raw)
    log.info("document_deleted", collection=collection.slug, doc_id=doc["id"])

    await run_hooks(
        collection.config.hooks.after_delete, doc=doc, id=doc["id"], req=args.req
    )
    return doc


def _selection(args: OperationArgs, restriction: dict[str, Any]) -> dict[str, Any]:
    """Filter for a bulk update/delete; an empty where is refused."""
    if not args.where:
        raise ValidationError(args.req.t("error:missingWhere"), field="where")
    return combine_filters(build_filter(args.where, args.req), restriction)


def _bulk_error(doc: dict, error: AppError) -> dict[str, Any]:
    return {"id": str(doc.get("_id")), "message": error.message, "code": error.error_code}


async def find(incoming_args: OperationArgs) -> dict[str, Any]:
    args = await run_before_operation(
        incoming_args.collection.config.hooks.before_operation, incoming_args, "find"
    )
    collection = args.collection
    restriction = await check_access(args, "read")

    limit = args.limit if args.limit is not None else collection.config.default_limit
    limit = max(limit, 0)
    page = max(args.page, 1)
    query = combine_filters(build_filter(args.where, args.req), restriction)

    total = await collection.store.count(query)
    raw_docs = await collection.store.find(
        query,
        sort=parse_sort(args.sort),
        limit=limit,
        skip=(page - 1) * limit,
    )
    docs = [await _after_read(args, collection.store.to_json(d)) for d in raw_docs]

    total_pages = math.ceil(total / limit) if limit else 1
    result = {
        "docs": docs,
        "totalDocs": total,
        "limit": limit,
        "page": page,
        "totalPages": total_pages,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
    }
    return await run_after_operation(
        collection.config.hooks.after_operation, args, "find", result
    )


async def find_by_id(incoming_args: OperationArgs) -> dict[str, Any]:
    args = await run_before_operation(
        incoming_args.collection.config.hooks.before_operation, incoming_args, "findByID"
    )
    collection = args.collection
    restriction = await check_access(args, "read")

    query = combine_filters({"_id": parse_object_id(args.id, args.req)}, restriction)
    raw = await collection.store.find_one(query)
    if raw is None:
        raise NotFoundError(args.req.t("error:notFound"))

    doc = await _after_read(args, collection.store.to_json(raw))
    return await run_after_operation(
        collection.config.hooks.after_operation, args, "findByID", doc
    )


async def create(incoming_args: OperationArgs) -> dict[str, Any]:
    args = await run_before_operation(
        incoming_args.collection.config.hooks.before_operation, incoming_args, "create"
    )
    collection = args.collection
    req = args.req
    await check_access(args, "create")

    data = await _prepare_data(args, "create")
    now = bson_now()
    data["createdAt"] = now
    data["updatedAt"] = now

    try:
        raw = await collection.store.insert(data)
    except DuplicateKeyError as e:
        raise ConflictError(req.t("error:userEmailAlreadyRegistered"), field="email") from e

    doc = collection.store.to_json(raw)
    log.info("document_created", collection=collection.slug, doc_id=doc["id"])

    await run_hooks(
        collection.config.hooks.after_change,
        doc=doc,
        previous_doc=None,
        operation="create",
        req=req,
    )
    doc = await _after_read(args, doc)
    return await run_after_operation(
        collection.config.hooks.after_operation, args, "create", doc
    )


async def update_by_id(incoming_args: OperationArgs) -> dict[str, Any]:
    args = await run_before_operation(
        incoming_args.collection.config.hooks.before_operation, incoming_args, "update"
    )
    collection = args.collection
    req = args.req
    restriction = await check_access(args, "update")

    query = combine_filters({"_id": parse_object_id(args.id, req)}, restriction)
    original = await collection.store.find_one(query)
    if original is None:
        raise NotFoundError(req.t("error:notFound"))

    doc = await _update_one(args, original)
    return await run_after_operation(
        collection.config.hooks.after_operation, args, "update", doc
    )


async def update(incoming_args: OperationArgs) -> dict[str, Any]:
    """Apply ``data`` to every document matching ``where``.

    Per-document client errors (a duplicate email, say) are collected in
    ``errors`` and the remaining documents are still updated.
    """
    args = await run_before_operation(
        incoming_args.collection.config.hooks.before_operation, incoming_args, "update"
    )
    collection = args.collection
    restriction = await check_access(args, "update")

    originals = await collection.store.find(
        _selection(args, restriction), sort=parse_sort(args.sort)
    )
    docs: list[dict] = []
    errors: list[dict] = []
    for original in originals:
        try:
            docs.append(await _update_one(args, original))
        except AppError as e:
            errors.append(_bulk_error(original, e))

    log.info(
        "documents_updated",
        collection=collection.slug,
        updated=len(docs),
        failed=len(errors),
    )
    return await run_after_operation(
        collection.config.hooks.after_operation,
        args,
        "update",
        {"docs": docs, "errors": errors},
    )


async def delete_by_id(incoming_args: OperationArgs) -> dict[str, Any]:
    args = await run_before_operation(
        incoming_args.collection.config.hooks.before_operation, incoming_args, "delete"
    )
    collection = args.collection
    req = args.req
    restriction = await check_access(args, "delete")

    query = combine_filters({"_id": parse_object_id(args.id, req)}, restriction)
    doc = await _delete_one(args, query)
    if doc is None:
        raise NotFoundError(req.t("error:notFound"))

    return await run_after_operation(
        collection.config.hooks.after_operation, args, "delete", doc
    )


async def delete(incoming_args: OperationArgs) -> dict[str, Any]:
    """Delete every document matching ``where``."""
    args = await run_before_operation(
        incoming_args.collection.config.hooks.before_operation, incoming_args, "delete"
    )
    collection = args.collection
    restriction = await check_access(args, "delete")

    targets = await collection.store.find(
        _selection(args, restriction), sort=parse_sort(args.sort)
    )
    docs: list[dict] = []
    for target in targets:
        doc = await _delete_one(args, {"_id": target["_id"]})
        if doc is not None:
            docs.append(doc)

    log.info("documents_deleted", collection=collection.slug, deleted=len(docs))
    return await run_after_operation(
        collection.config.hooks.after_operation,
        args,
        "delete",
        {"docs": docs, "errors": []},
    )
