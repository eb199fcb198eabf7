"""Factories for constructing components from configuration."""

from __future__ import annotations

from functools import partial
from typing import Optional

from .browser.playwright_session import PlaywrightBrowserDriver
from .browser.vnc import VNCBridge
from .config import BrowserConfig, LoginConfig, PollingConfig, ServiceConfig, SiteConfig
from .notifications.base import ConsoleNotifier, Notifier
from .orchestrator.poller import StabilizationPoller
from .orchestrator.runner import PromptOrchestrator
from .session.bootstrap import SessionBootstrapper
from .session.credentials import CredentialStore
from .session.login import ConsoleLoginWaiter, LoginFlow, LoginWaiter
from .session.portal import PortalLoginWaiter


def build_driver(
    browser: BrowserConfig,
    site: SiteConfig,
    *,
    headless: Optional[bool] = None,
) -> PlaywrightBrowserDriver:
    return PlaywrightBrowserDriver(browser, site.selectors, headless=headless)


def build_credential_store(config: ServiceConfig) -> CredentialStore:
    return CredentialStore(config.auth_state_path)


def build_notifier() -> Notifier:
    return ConsoleNotifier()


def build_login_waiter(config: LoginConfig) -> LoginWaiter:
    if config.waiter == "portal":
        return PortalLoginWaiter(host=config.portal_host, port=config.portal_port)
    if config.waiter == "console":
        return ConsoleLoginWaiter()
    raise ValueError(f"Unsupported login waiter: {config.waiter}")


def build_login_flow(config: ServiceConfig, notifier: Notifier) -> LoginFlow:
    vnc = VNCBridge.from_config(config.login, config.browser) if config.login.enable_vnc else None
    return LoginFlow(
        config.site,
        partial(build_driver, config.browser, config.site, headless=config.login.headless),
        build_login_waiter(config.login),
        notifier=notifier,
        vnc=vnc,
        timeout=config.login.timeout,
    )


def build_poller(config: PollingConfig) -> StabilizationPoller:
    return StabilizationPoller(config)


def build_orchestrator(config: ServiceConfig, notifier: Optional[Notifier] = None) -> PromptOrchestrator:
    notifier = notifier or build_notifier()
    login_flow = build_login_flow(config, notifier) if config.login.interactive else None
    bootstrapper = SessionBootstrapper(
        config.site,
        partial(build_driver, config.browser, config.site),
        build_credential_store(config),
        login_flow=login_flow,
        notifier=notifier,
    )
    return PromptOrchestrator(bootstrapper, poller=build_poller(config.polling))
