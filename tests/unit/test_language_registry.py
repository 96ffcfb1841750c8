"""
Unit tests for the language plugin registry.
"""

import pytest

from registrygen.config.models import LanguageType
from registrygen.languages.java.plugin import JavaPlugin
from registrygen.languages.python.plugin import PythonPlugin
from registrygen.languages.registry import LanguagePluginRegistry


def test_get_plugin():
    assert isinstance(LanguagePluginRegistry.get_plugin(LanguageType.PYTHON), PythonPlugin)
    assert isinstance(LanguagePluginRegistry.get_plugin(LanguageType.JAVA), JavaPlugin)


def test_get_plugin_returns_fresh_instances():
    first = LanguagePluginRegistry.get_plugin(LanguageType.JAVA)
    second = LanguagePluginRegistry.get_plugin(LanguageType.JAVA)

    assert first is not second


def test_register_plugin_replaces_and_validates(monkeypatch):
    class CustomPython(PythonPlugin):
        pass

    monkeypatch.setattr(LanguagePluginRegistry, "_plugins", dict(LanguagePluginRegistry._plugins))
    LanguagePluginRegistry.register_plugin(LanguageType.PYTHON, CustomPython)

    assert isinstance(LanguagePluginRegistry.get_plugin(LanguageType.PYTHON), CustomPython)

    with pytest.raises(TypeError):
        LanguagePluginRegistry.register_plugin(LanguageType.PYTHON, dict)


def test_list_supported_languages():
    assert sorted(LanguagePluginRegistry.list_supported_languages()) == ["java", "python"]
