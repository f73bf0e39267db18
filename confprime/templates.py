from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from jinja2 import BaseLoader, Environment, FileSystemLoader, StrictUndefined

import confprime as cp


txt_ext = '.txt.jinja'


class BadTemplateNameError(Exception):
    def __init__(self, name: str):
        super().__init__(f'bad template name \'{name}\'')


class Loader(BaseLoader):
    """Looks in an override folder first, then falls back to
    the package templates."""

    def __init__(self, path: Optional[Path], chain_loader: BaseLoader):
        self.path = path
        self.chain_loader = chain_loader

    def get_source(self, environment, template):
        if not self.path or not (path := self.path / template).is_file():
            return self.chain_loader.get_source(environment, template)
        mtime = path.stat().st_mtime
        with open(path) as f:
            source = f.read()
        return source, str(path), lambda: mtime == path.stat().st_mtime


env = Environment(
    loader=Loader(None, FileSystemLoader(cp.pkg_path / 'templates')),
    undefined=StrictUndefined,
    keep_trailing_newline=True)


def set_override_path(path: Optional[Path]):
    assert isinstance(env.loader, Loader)
    if path:
        cp.log.info(f'template override path: {path}')
    env.loader.path = path
    # templates already loaded may now be shadowed
    env.cache.clear()


def render(tplt: str, tplt_vars: dict[str, Any] = {}):
    if '..' in tplt:
        raise BadTemplateNameError(tplt)
    return env.get_template(tplt).render(**tplt_vars)
