import pytest

from vsixforge.manifest.model import Manifest


BASE_MANIFEST = {
    "name": "ext",
    "publisher": "pub",
    "version": "1.0.0",
    "engines": {"vscode": "^1.50.0"},
    "repository": {"type": "git", "url": "https://github.com/pub/ext.git"},
}



@pytest.fixture
def makeManifest():
    def _make(**overrides) -> Manifest:
        raw = {**BASE_MANIFEST, **overrides}
        return Manifest.model_validate({key: value for key, value in raw.items() if value is not None})
    return _make
