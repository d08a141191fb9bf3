"""Motion API client for task operations."""

import logging
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ...core.config import DEFAULT_MOTION_BASE_URL
from ...core.dates import ensure_utc, parse_iso
from ...exceptions import MotionAPIError

logger = logging.getLogger(__name__)


class MotionTaskPages:
    """Every task of a Motion workspace, fetched lazily one page at a time.
    
    Each iteration starts again from the first page, so the sequence can be
    consumed more than once.
    """
    
    def __init__(self, client: "MotionClient", workspace_id: str):
        self._client = client
        self.workspace_id = workspace_id
    
    def pages(self) -> Iterator[List[Dict[str, Any]]]:
        cursor: Optional[str] = None
        page = 1
        
        while True:
            params = {'workspaceId': self.workspace_id}
            if cursor:
                params['cursor'] = cursor
            
            logger.info(f"Fetching Motion tasks page {page} of workspace {self.workspace_id}")
            data = self._client._make_request('GET', '/tasks', params=params) or {}
            yield data.get('tasks') or []
            
            cursor = (data.get('meta') or {}).get('nextCursor')
            if not cursor:
                break
            page += 1
    
    def __iter__(self) -> Iterator[Dict[str, Any]]:
        for page in self.pages():
            yield from page


class MotionClient:
    """Client for interacting with the Motion v1 API."""
    
    def __init__(self, api_key: str, base_url: str = DEFAULT_MOTION_BASE_URL, timeout: int = 30):
        """Initialize the Motion client.
        
        Args:
            api_key: Motion API key
            base_url: Base URL for Motion API
            timeout: Per-request timeout in seconds
        """
        if not api_key:
            raise ValueError("MotionClient requires an API key")
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        
        # Motion rate limits aggressively; task creation (POST) is not retried
        self.session = requests.Session()
        retry_strategy = Retry(
            total=3,
            status_forcelist=[429, 500, 502, 503, 504],
            backoff_factor=2,
            raise_on_status=False
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        
        self.session.headers.update({
            'X-API-Key': self.api_key,
            'Accept': 'application/json',
            'Content-Type': 'application/json',
            'User-Agent': 'tasksync/1.0'
        })
    
    def _make_request(self, method: str, endpoint: str, params: Optional[Dict[str, Any]] = None,
                      data: Optional[Dict[str, Any]] = None) -> Any:
        """Make a request to the Motion API.
        
        Raises:
            MotionAPIError: If the API request fails
        """
        url = f"{self.base_url}{endpoint}"
        
        try:
            logger.debug(f"Making {method} request to {url} with params: {params}")
            response = self.session.request(method, url, params=params, json=data, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Motion API request failed: {e}")
            if e.response is not None:
                raise MotionAPIError(
                    f"HTTP {e.response.status_code}: {e.response.text}",
                    status_code=e.response.status_code,
                    response_body=e.response.text
                ) from e
            raise MotionAPIError(f"Request failed: {e}") from e
        
        if response.status_code == 204 or not response.content:
            return None
        return response.json()
    
    def get_current_user(self) -> Dict[str, Any]:
        """Return the user owning the API key."""
        return self._make_request('GET', '/users/me') or {}
    
    def iter_tasks(self, workspace_id: str) -> MotionTaskPages:
        """All tasks of a workspace as a lazy, restartable sequence."""
        return MotionTaskPages(self, workspace_id)
    
    def get_tasks_updated_since(self, workspace_id: str, updated_since: datetime) -> List[Dict[str, Any]]:
        """Get tasks of a workspace updated strictly after ``updated_since``.
        
        Motion has no server-side filter on update time, so every page is read
        and filtered here; only the changed tasks are kept in memory.
        """
        since = ensure_utc(updated_since)
        total = 0
        changed = []
        
        for task in self.iter_tasks(workspace_id):
            total += 1
            updated_time = task.get('updatedTime')
            try:
                if updated_time and parse_iso(updated_time) > since:
                    changed.append(task)
            except ValueError:
                logger.warning(f"Motion task {task.get('id')} has unparseable updatedTime {updated_time!r}")
        
        logger.info(f"Scanned {total} Motion tasks in workspace {workspace_id}, {len(changed)} updated since {since.isoformat()}")
        return changed
    
    def create_task(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create a task; the workspace is part of the payload."""
        logger.info(f"Creating Motion task in workspace {payload.get('workspaceId')}: {payload.get('name')}")
        return self._make_request('POST', '/tasks', data=payload)
