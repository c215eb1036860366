"""Tests for configuration loading, validation and logging setup."""

import json
import logging

import pytest
import yaml

from golflesson.config.logging import setup_logging
from golflesson.config.logging_config import load_logging_config
from golflesson.config.logging_filters import SensitiveDataFilter
from golflesson.config.settings import ConfigurationManager, build_app_config
from golflesson.config.types import AppConfig, PolicyConfig
from golflesson.config.utils import deep_merge
from golflesson.config.validation import ConfigValidationError, validate_config


@pytest.fixture
def config_dir(tmp_path):
    path = tmp_path / "config"
    path.mkdir()
    return path

@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)

def _write_yaml(path, data):
    path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")

def test_defaults_without_config_file(config_dir):
    config = ConfigurationManager().load_config(str(config_dir))

    assert config.timezone == "Asia/Tokyo"
    assert config.policy == PolicyConfig(free_days=7, half_days=3)
    assert config.mail.from_email == "onboarding@resend.dev"
    assert not config.mail.enabled
    assert config.config_dir == str(config_dir)

def test_config_file_and_environment(config_dir, monkeypatch):
    _write_yaml(config_dir / "config.yaml", {
        'app_url': "https://lesson.example.com/",
        'mail': {'from_email': "lesson@example.com", 'admin_email': "owner@example.com"},
        'policy': {'free_days': 10, 'half_days': 4},
    })
    monkeypatch.setenv("RESEND_API_KEY", "re_test")
    monkeypatch.setenv("ADMIN_EMAIL", "mayumi@example.com")

    config = ConfigurationManager().load_config(str(config_dir))

    assert config.app_url == "https://lesson.example.com"
    assert config.mail.api_key == "re_test"
    assert config.mail.enabled
    assert config.mail.from_email == "lesson@example.com"
    assert config.mail.admin_email == "mayumi@example.com"
    assert config.policy == PolicyConfig(free_days=10, half_days=4)

def test_configuration_is_cached(config_dir):
    manager = ConfigurationManager()
    first = manager.load_config(str(config_dir))
    assert ConfigurationManager().load_config() is first
    assert manager.reload_config(str(config_dir)) is not first

def test_log_file_section():
    config = build_app_config({'logging': {'file': {'enabled': True, 'path': "logs/app.log"}}})
    assert config.log_file == "logs/app.log"
    assert build_app_config({'logging': {'file': {'path': "logs/app.log"}}}).log_file is None

def test_deep_merge():
    base = {'mail': {'from_email': "a@example.com", 'admin_email': ""}, 'timezone': "Asia/Tokyo"}
    merged = deep_merge(base, {'mail': {'admin_email': "b@example.com"}})
    assert merged == {'mail': {'from_email': "a@example.com", 'admin_email': "b@example.com"}, 'timezone': "Asia/Tokyo"}
    assert base['mail']['admin_email'] == ""

def test_validate_config_resolves_directories(tmp_path):
    config = AppConfig(global_config={}, config_dir=str(tmp_path / "config"))
    validate_config(config)

    assert config.data_dir == str(tmp_path / "data")
    assert (tmp_path / "data").is_dir()
    assert (tmp_path / "ics").is_dir()

@pytest.mark.parametrize("changes, message", [
    ({'timezone': "Mars/Olympus"}, "Invalid timezone"),
    ({'policy': PolicyConfig(free_days=3, half_days=3)}, "thresholds"),
    ({'policy': PolicyConfig(free_days=7, half_days=-1)}, "thresholds"),
])
def test_validate_config_rejects(tmp_path, changes, message):
    config = AppConfig(global_config={}, config_dir=str(tmp_path / "config"), **changes)
    with pytest.raises(ConfigValidationError, match=message):
        validate_config(config)

def test_validate_config_rejects_bad_admin_address(tmp_path):
    config = AppConfig(global_config={}, config_dir=str(tmp_path / "config"))
    config.mail.admin_email = "owner"
    with pytest.raises(ConfigValidationError) as exc_info:
        validate_config(config)
    assert exc_info.value.details == {"field": "mail.admin_email"}

def test_load_logging_config_string_file():
    logging_config = load_logging_config({'default_level': "info", 'file': "logs/lesson.log"})
    assert logging_config.default_level == "INFO"
    assert logging_config.file.enabled
    assert logging_config.file.path == "logs/lesson.log"
    assert logging_config.libraries['resend'] == "WARNING"

def test_load_logging_config_from_yaml(config_dir):
    _write_yaml(config_dir / "logging_config.yaml", {'console': {'color': False}, 'dev_level': "debug"})
    logging_config = load_logging_config(config_path=str(config_dir / "logging_config.yaml"))
    assert logging_config.console.color is False
    assert logging_config.dev_level == "DEBUG"

def test_setup_logging_writes_masked_json(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "lesson.log"
    config = AppConfig(global_config={'logging': {'console': {'enabled': False}}})

    setup_logging(config, dev_mode=True, log_file=str(log_file))
    logging.getLogger("golflesson.test").info(
        "Reservation created",
        extra={'extra_fields': {'reservation_id': "rsv-1", 'email': "taro@example.com"}}
    )
    for handler in restore_root_logger.handlers:
        handler.flush()

    [line] = log_file.read_text(encoding="utf-8").splitlines()
    record = json.loads(line)
    assert record['message'] == "Reservation created"
    assert record['reservation_id'] == "rsv-1"
    assert record['email'] == "***MASKED***"

def test_setup_logging_levels(restore_root_logger):
    config = AppConfig(global_config={'logging': {'default_level': "ERROR"}})

    setup_logging(config)
    assert restore_root_logger.level == logging.ERROR

    setup_logging(config, verbose=True)
    assert restore_root_logger.level == logging.DEBUG

def test_sensitive_filter_masks_nested_fields():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
    record.extra_fields = {'recipients': [{'email': "a@example.com", 'name': "A"}], 'api_key': "re_x"}

    assert SensitiveDataFilter().filter(record)
    assert record.extra_fields == {'recipients': [{'email': "***MASKED***", 'name': "A"}], 'api_key': "***MASKED***"}
