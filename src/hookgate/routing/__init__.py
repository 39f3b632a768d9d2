"""Route table: key to destination URL mapping with durable storage and reload.

- route_table: RouteTable store and route file load/save
- reloader: RouteReloader (SIGHUP, API, file watcher)
- watcher: RouteFileWatcher polling for external edits
"""

from hookgate.routing.reloader import RouteReloader, RouteReloadResult
from hookgate.routing.route_table import RouteTable, load_routes, read_routes_file, save_routes
from hookgate.routing.watcher import RouteFileWatcher

__all__ = [
    "RouteFileWatcher",
    "RouteReloadResult",
    "RouteReloader",
    "RouteTable",
    "load_routes",
    "read_routes_file",
    "save_routes",
]
