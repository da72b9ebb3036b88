"""Tests for the structured logger factory."""

import logging

from conftest import InMemoryRecordStore, fixed_clock
from field_resources.descriptors import ATTENDANCE, DAILY_VISIT_REPORTS
from resource_api.service import ResourceService
from util_logger import ComponentType, LogContext, LoggerFactory


def _dimensions(caplog, prefix):
    return [r.custom_dimensions for r in caplog.records if r.getMessage().startswith(prefix)]


def test_resource_context_stays_with_its_own_service(caplog, resource_config):
    """Services built later must not take over the log context of earlier ones."""
    caplog.set_level(logging.INFO)
    dvr = ResourceService(DAILY_VISIT_REPORTS, InMemoryRecordStore(), config=resource_config, clock=fixed_clock)
    attendance = ResourceService(ATTENDANCE, InMemoryRecordStore(), config=resource_config, clock=fixed_clock)

    dvr.list_by_owner("7")
    attendance.list_by_owner("7")

    assert [d["resource"] for d in _dimensions(caplog, "Listed")] == ["dvr", "attendance"]
    assert dvr.logger is not attendance.logger


def test_logger_name_includes_resource():
    logger = LoggerFactory.create_logger(ComponentType.SERVICE, "Sample", context=LogContext(resource="tvr"))

    assert logger.name == "service.Sample.tvr"
    assert LoggerFactory.create_logger(ComponentType.SERVICE, "Sample").name == "service.Sample"


def test_recreated_logger_emits_once_with_latest_context(caplog):
    caplog.set_level(logging.INFO)
    LoggerFactory.create_logger(ComponentType.FACTORY, "Recreated", context=LogContext(operation="first"))
    logger = LoggerFactory.create_logger(ComponentType.FACTORY, "Recreated", context=LogContext(operation="second"))

    logger.info("hello", extra={'custom_dimensions': {'extra_key': 1}})

    dims = _dimensions(caplog, "hello")
    assert len(dims) == 1
    assert dims[0]["operation"] == "second"
    assert dims[0]["component_name"] == "Recreated"
    assert dims[0]["extra_key"] == 1
