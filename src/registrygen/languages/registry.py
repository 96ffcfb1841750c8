"""
Language plugin registry.

Maps each source language to the plugin that scans and renders it.
"""

from typing import Type

from registrygen.config.models import LanguageType
from registrygen.languages.base.plugin import LanguagePlugin
from registrygen.languages.java.plugin import JavaPlugin
from registrygen.languages.python.plugin import PythonPlugin


class LanguagePluginRegistry:
    """Registry for language plugins."""

    _plugins: dict[LanguageType, Type[LanguagePlugin]] = {
        LanguageType.PYTHON: PythonPlugin,
        LanguageType.JAVA: JavaPlugin,
    }

    @classmethod
    def get_plugin(cls, language: LanguageType) -> LanguagePlugin:
        """
        Instantiate the plugin for a language.

        Raises:
            ValueError: If no plugin handles the language
        """
        plugin_class = cls._plugins.get(language)
        if plugin_class is None:
            raise ValueError(
                f"Unsupported language: {language}. "
                f"Supported languages: {cls.list_supported_languages()}"
            )
        return plugin_class()

    @classmethod
    def register_plugin(cls, language: LanguageType, plugin_class: Type[LanguagePlugin]):
        """Register (or replace) the plugin class for a language."""
        if not issubclass(plugin_class, LanguagePlugin):
            raise TypeError(f"{plugin_class} must extend LanguagePlugin")

        cls._plugins[language] = plugin_class

    @classmethod
    def list_supported_languages(cls) -> list[str]:
        return [lang.value for lang in cls._plugins]
