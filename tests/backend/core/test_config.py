import pytest

from backend.core import config
from backend.core.errors import InvalidConfiguration, MissingConfiguration


def test_validate_runtime_config_accepts_complete_settings() -> None:
    config.validate_runtime_config()


@pytest.mark.parametrize('setting', ['JWT_ISSUER', 'JWT_AUDIENCE', 'JWT_SECRET_KEY'])
def test_validate_runtime_config_rejects_missing_jwt_setting(monkeypatch: pytest.MonkeyPatch, setting: str) -> None:
    monkeypatch.setattr(config, setting, None)

    with pytest.raises(MissingConfiguration) as exception_info:
        config.validate_runtime_config()

    assert exception_info.value.names == [setting]


@pytest.mark.parametrize(('setting', 'value'), [('CREDENTIAL_STORE', 'redis'), ('REGISTRATION_DEFAULT_ROLE', 'root')])
def test_validate_runtime_config_rejects_invalid_values(
    monkeypatch: pytest.MonkeyPatch, setting: str, value: str
) -> None:
    monkeypatch.setattr(config, setting, value)

    with pytest.raises(InvalidConfiguration) as exception_info:
        config.validate_runtime_config()

    assert not isinstance(exception_info.value, MissingConfiguration)
    assert exception_info.value.name == setting
    assert repr(value) in str(exception_info.value)


@pytest.mark.parametrize(('raw', 'expected'), [(None, 60), ('15', 15), (' 30 ', 30), ('sixty', 60)])
def test_get_int_falls_back_to_default(raw, expected: int) -> None:
    assert config._get_int(raw, 60) == expected
