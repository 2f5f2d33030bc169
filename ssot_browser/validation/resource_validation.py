from __future__ import annotations

import logging

from ssot_browser.config.model import ResourceConfig
from ssot_browser.core.record_store import RecordStore
from ssot_browser.validation.errors import ValidationError, ValidationIssue


def validate_resource(cfg: ResourceConfig, store: RecordStore) -> None:
    """
    Check that every column the config refers to exists in the loaded dataset.
    Column names are the only thing checked; values are never inspected.
    """
    if not store:
        return

    columns = set(store.columns)
    issues: list[ValidationIssue] = []

    for facet in cfg.facets:
        if facet.column not in columns:
            issues.append(
                ValidationIssue(
                    "FACET_COLUMN",
                    f"facet '{facet.name}' column '{facet.column}' not in dataset.",
                    column=facet.column,
                )
            )

    for d in cfg.edit_scopes:
        if d.governed_column not in columns:
            issues.append(
                ValidationIssue(
                    "SCOPE_GOVERNED_COLUMN",
                    f"governed column '{d.governed_column}' not in dataset.",
                    column=d.governed_column,
                )
            )
        for key in d.key_columns:
            if key not in columns:
                issues.append(
                    ValidationIssue(
                        "SCOPE_KEY_COLUMN",
                        f"key column '{key}' of '{d.governed_column}' not in dataset.",
                        column=key,
                    )
                )
        for field_name in d.payload_fields or ():
            if field_name not in columns and field_name not in d.key_columns:
                issues.append(
                    ValidationIssue(
                        "SCOPE_PAYLOAD_FIELD",
                        f"payload field '{field_name}' of '{d.governed_column}' not in dataset.",
                        column=field_name,
                    )
                )

    if issues:
        raise ValidationError(cfg.key, issues)


def warn_on_invalid_resource(cfg: ResourceConfig, store: RecordStore, logger: logging.Logger) -> bool:
    """
    Validate and log a warning instead of failing: the table still renders,
    but a misconfigured facet or scope shows up in the logs right after load.
    Returns True when the resource is valid.
    """
    try:
        validate_resource(cfg, store)
    except ValidationError as e:
        logger.warning(
            "Resource validation failed: %s",
            e,
            extra={"resource": cfg.key, "missing_columns": e.missing_columns},
        )
        return False
    return True
