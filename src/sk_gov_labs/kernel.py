"""Kernel wiring for the labs: Azure OpenAI services, plugins and filters."""
from typing import Any, Dict, Optional

from semantic_kernel import Kernel
from semantic_kernel.connectors.ai.open_ai import AzureChatCompletion, AzureTextEmbedding

from .config import LabSettings
from .filters import LoggingFilter, TimingFilter, register_filters

CHAT_SERVICE_ID = "azure_chat"
EMBEDDING_SERVICE_ID = "azure_embeddings"


def build_chat_service(settings: LabSettings) -> AzureChatCompletion:
    return AzureChatCompletion(
        service_id=CHAT_SERVICE_ID,
        endpoint=settings.endpoint,
        api_key=settings.api_key,
        deployment_name=settings.chat_deployment,
        api_version=settings.api_version,
    )


def build_embedding_service(settings: LabSettings) -> AzureTextEmbedding:
    return AzureTextEmbedding(
        service_id=EMBEDDING_SERVICE_ID,
        endpoint=settings.endpoint,
        api_key=settings.api_key,
        deployment_name=settings.embedding_deployment,
        api_version=settings.api_version,
    )


def build_kernel(
    settings: LabSettings,
    *,
    plugins: Optional[Dict[str, Any]] = None,
    filters: bool = True,
    embeddings: bool = False,
    timing_filter: Optional[TimingFilter] = None,
) -> Kernel:
    """Create a kernel with the chat service and, optionally, embeddings.

    `plugins` maps plugin names to plugin instances. When `filters` is set the
    logging filter and a timing filter (the one passed in, or a new one) are
    installed for every function invocation.
    """
    kernel = Kernel()
    kernel.add_service(build_chat_service(settings))
    if embeddings:
        kernel.add_service(build_embedding_service(settings))

    for name, plugin in (plugins or {}).items():
        kernel.add_plugin(plugin, plugin_name=name)

    if filters:
        register_filters(kernel, LoggingFilter(), timing_filter or TimingFilter())
    return kernel
