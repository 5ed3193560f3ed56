"""
Traffic filtering and user-agent classification for analytics ingestion.

Filtering order on ingest:
    1. internal traffic (excluded IPs, Tailscale CGNAT range)
    2. per-IP rate limit
    3. bots (short UA, known patterns, headless heuristics)
"""

from __future__ import annotations

import hashlib
import ipaddress
import re
from collections.abc import Mapping

TAILSCALE_NETWORK = ipaddress.ip_network("100.64.0.0/10")

BOT_PATTERNS = re.compile(
    "|".join(
        [
            # Generic bots
            "bot", "crawler", "spider", "scraper", "slurp",
            # HTTP clients
            "curl", "wget", "python", "java", "php", "go-http", "axios", "node-fetch",
            # API testing tools
            "postman", "insomnia", "httpie", "thunder client",
            # SEO crawlers
            "screaming frog", "ahrefs", "semrush", r"moz\.com", "majestic", "seokicks",
            "sistrix", "serpstat", "linkdex", "netcraft", "rogerbot",
            # Search engines
            "googlebot", "bingbot", "yandex", "baiduspider", "duckduckbot",
            # Social media
            "facebookexternalhit", "twitterbot", "linkedinbot", "whatsapp", "telegrambot",
            # Monitoring
            "pingdom", "uptimerobot", "statuscake", "site24x7", "gtmetrix", "pagespeed",
            # Headless browsers
            "headlesschrome", "phantomjs", "puppeteer", "playwright", "selenium",
            # Other
            "applebot", "pinterestbot", "slackbot", "discordbot", r"archive\.org",
        ]
    ),
    re.IGNORECASE,
)

MIN_UA_LENGTH = 10


# --- Client address ---


def client_ip(headers: Mapping[str, str], peer: str | None) -> str:
    """First X-Forwarded-For hop, then X-Real-IP, then the socket peer."""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return peer or "unknown"


def is_tailscale_ip(ip: str) -> bool:
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return False
    return addr.version == 4 and addr in TAILSCALE_NETWORK


def is_internal_ip(ip: str, excluded_ips: list[str], exclude_tailscale: bool = True) -> bool:
    if ip in excluded_ips:
        return True
    return exclude_tailscale and is_tailscale_ip(ip)


# --- Bot detection ---


def is_headless_browser(user_agent: str, accept_language: str | None) -> bool:
    ua = user_agent.lower()
    if "headless" in ua:
        return True
    # Real browsers send Accept-Language
    if accept_language:
        return False
    return "chrome" in ua


def is_bot(user_agent: str | None, accept_language: str | None = None) -> bool:
    if not user_agent or len(user_agent) < MIN_UA_LENGTH:
        return True
    if BOT_PATTERNS.search(user_agent):
        return True
    return is_headless_browser(user_agent, accept_language)


# --- Classification ---


def user_hash(ip: str, user_agent: str) -> str:
    """Stable pseudonymous visitor id: first 16 hex chars of sha256("ip|ua")."""
    return hashlib.sha256(f"{ip}|{user_agent}".encode()).hexdigest()[:16]


def device_type(user_agent: str) -> str:
    if re.search(r"mobile|android|iphone|ipad|ipod|blackberry|windows phone", user_agent, re.I):
        if re.search(r"ipad|tablet", user_agent, re.I):
            return "tablet"
        return "mobile"
    return "desktop"


def browser_name(user_agent: str) -> str:
    # Order matters: Edge and Opera UAs also contain "Chrome"
    if re.search(r"edg", user_agent, re.I):
        return "Edge"
    if re.search(r"opr|opera", user_agent, re.I):
        return "Opera"
    if re.search(r"chrome|crios|chromium", user_agent, re.I):
        return "Chrome"
    if re.search(r"firefox|fxios", user_agent, re.I):
        return "Firefox"
    if re.search(r"safari", user_agent, re.I):
        return "Safari"
    return "Other"


def os_name(user_agent: str) -> str:
    if re.search(r"windows", user_agent, re.I):
        return "Windows"
    if re.search(r"macintosh|mac os", user_agent, re.I):
        return "macOS"
    if re.search(r"linux", user_agent, re.I):
        return "Linux"
    if re.search(r"android", user_agent, re.I):
        return "Android"
    if re.search(r"iphone|ipad|ipod", user_agent, re.I):
        return "iOS"
    return "Other"
