"""
Audit Logging for Content Changes

Every post mutation, asset upload and authentication attempt is written to
``instance/logs/audit.log`` with timestamp, acting user and operation details.

Usage:
    from folio.audit import audit_log_create, audit_log_update, audit_log_delete

    audit_log_create('Post', slug, f'Created post: {title}')
    audit_log_update('Post', slug, 'Status changed', {'status': 'draft'})
    audit_log_delete('Post', slug, 'Deleted post')
"""

import logging
import os
from typing import Any, Dict, Optional

from flask import current_app
from flask_login import current_user


def setup_audit_logger():
    """Setup and configure the audit logger with file handling."""
    audit_logger = logging.getLogger('audit')
    audit_logger.setLevel(logging.INFO)

    # Prevent duplicate log entries
    if audit_logger.hasHandlers():
        return audit_logger

    log_dir = os.path.join(current_app.instance_path, 'logs')
    os.makedirs(log_dir, exist_ok=True)

    file_handler = logging.FileHandler(os.path.join(log_dir, 'audit.log'), mode='a', encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    audit_logger.addHandler(file_handler)

    # Prevent propagation to root logger
    audit_logger.propagate = False

    return audit_logger


def get_current_user_info() -> str:
    """Get current user information for audit logging."""
    if current_user and current_user.is_authenticated:
        return current_user.username
    return "ANONYMOUS"


def _format_extra(data: Optional[Dict[str, Any]]) -> str:
    if not data:
        return ""
    return " | " + ", ".join(f"{k}={v}" for k, v in data.items())


def audit_log_create(model_name: str, record_id: str, description: str,
                     additional_data: Optional[Dict[str, Any]] = None):
    """
    Log record creation.

    Args:
        model_name: Name of the entity (e.g. 'Post')
        record_id: Identifier of the created record (the slug for posts)
        description: Human-readable description of the operation
        additional_data: Optional additional data to include in the log
    """
    logger = setup_audit_logger()
    logger.info(f"CREATE | {model_name} | ID: {record_id} | User: {get_current_user_info()} | "
                f"{description}{_format_extra(additional_data)}")


def audit_log_update(model_name: str, record_id: str, description: str,
                     changes: Optional[Dict[str, Any]] = None):
    """
    Log record updates.

    Args:
        changes: Optional dictionary of field changes {'field': 'old_value'}
    """
    logger = setup_audit_logger()
    logger.info(f"UPDATE | {model_name} | ID: {record_id} | User: {get_current_user_info()} | "
                f"{description}{_format_extra(changes)}")


def audit_log_delete(model_name: str, record_id: str, description: str):
    logger = setup_audit_logger()
    logger.info(f"DELETE | {model_name} | ID: {record_id} | User: {get_current_user_info()} | {description}")


def audit_log_authentication(event_type: str, username: str, success: bool):
    """
    Log authentication events.

    Args:
        event_type: Type of authentication event ('LOGIN', 'LOGOUT')
        username: Username involved in the event
        success: Whether the operation was successful
    """
    logger = setup_audit_logger()
    status = "SUCCESS" if success else "FAILURE"
    logger.info(f"AUTH | {event_type} | {status} | User: {username}")


def audit_log_security_event(event_type: str, description: str):
    """
    Log security-related events.

    Args:
        event_type: Type of security event ('ACCESS_DENIED', 'MISCONFIGURED')
        description: Human-readable description of the event
    """
    logger = setup_audit_logger()
    logger.warning(f"SECURITY | {event_type} | User: {get_current_user_info()} | {description}")


def audit_log_file_operation(operation: str, filename: str, description: str):
    """
    Log file operations (uploads, deletions).

    Args:
        operation: Type of file operation ('UPLOAD', 'DELETE')
        filename: Storage key of the file involved
    """
    logger = setup_audit_logger()
    logger.info(f"FILE | {operation} | File: {filename} | User: {get_current_user_info()} | {description}")
