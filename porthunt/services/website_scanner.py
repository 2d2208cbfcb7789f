"""
Website Scanner Service
Checks the web presence of a host: robots.txt and reachable pages
"""

import requests
from bs4 import BeautifulSoup
from typing import Iterable, Optional, Dict, Any

from porthunt.models.scan_result import WebsiteInfo
from porthunt.services.notifier import LogType, Notifier, no_log
from porthunt.services.user_agents import random_user_agent


class WebsiteScanner:
    """
    Website Scanner

    Features:
    - robots.txt retrieval
    - Page reachability checks (HTTP 200)
    - Page title extraction
    """

    DEFAULT_PATHS = ['/', '/login', '/admin', '/sitemap.xml', '/.well-known/security.txt']

    def __init__(
        self,
        host: str,
        timeout: float = 10.0,
        user_agent: Optional[str] = None,
        notify: Optional[Notifier] = None
    ):
        """
        Initialize Website Scanner

        Args:
            host: Domain name (optionally including subdomain and port)
            timeout: Request timeout
            user_agent: Custom User-Agent, picked from the pool when empty
            notify: Notifier for found pages and errors
        """
        self.host = host.strip().lower()
        self.base_url = f"http://{self.host}"
        self.timeout = timeout
        self.notify = notify or no_log()

        self.user_agent = user_agent or random_user_agent()
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': self.user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        })

    def _get(self, path: str) -> requests.Response:
        return self.session.get(self.base_url + path, timeout=self.timeout, allow_redirects=True)

    def fetch_robots_txt(self, info: Optional[WebsiteInfo] = None) -> WebsiteInfo:
        """Fetch /robots.txt, any status other than 200 means there is none"""
        info = info or WebsiteInfo(host=self.host)

        try:
            response = self._get('/robots.txt')
        except requests.exceptions.RequestException as e:
            info.errors.append(f"robots.txt: {e}")
            self.notify(LogType.ERROR, f"{self.host!r}: send robots.txt request: {e}")
            return info

        if response.status_code != 200:
            self.notify(LogType.DEBUG, f"{self.host!r}: no robots.txt (HTTP {response.status_code})")
            return info

        info.robots_txt = response.text
        self.notify(LogType.SUCCESS, f"{self.host!r}: robots.txt\n{response.text}")
        return info

    def check_page(self, path: str) -> Optional[Dict[str, Any]]:
        """
        Check whether a page answers 200

        Returns:
            Dict with path, final url and title, or None when unreachable

        Raises:
            requests.exceptions.RequestException on network errors
        """
        if not path.startswith('/'):
            path = '/' + path

        response = self._get(path)
        if response.status_code != 200:
            return None

        page = {
            'path': path,
            'url': response.url,
            'status_code': response.status_code,
            'content_type': response.headers.get('Content-Type', ''),
            'title': None,
        }
        if 'html' in page['content_type']:
            soup = BeautifulSoup(response.text, 'html.parser')
            if soup.title and soup.title.string:
                page['title'] = soup.title.string.strip()
        return page

    def scan_pages(self, paths: Optional[Iterable[str]] = None, info: Optional[WebsiteInfo] = None) -> WebsiteInfo:
        """Record every path that answers 200"""
        info = info or WebsiteInfo(host=self.host)

        for path in paths or self.DEFAULT_PATHS:
            self.notify(LogType.DEBUG, f"{self.host!r}: scan website page: {path}")
            try:
                page = self.check_page(path)
            except requests.exceptions.RequestException as e:
                # Host is unreachable, the remaining paths would fail the same way
                info.errors.append(f"{path}: {e}")
                self.notify(LogType.ERROR, f"{self.host!r}: send page request: {e}")
                break

            if page:
                info.pages.append(page)
                self.notify(LogType.SUCCESS, f"{self.host!r}: has page: {page['path']}")

        return info

    def scan(self, paths: Optional[Iterable[str]] = None) -> WebsiteInfo:
        """Fetch robots.txt then check pages"""
        info = self.fetch_robots_txt()
        return self.scan_pages(paths, info)
