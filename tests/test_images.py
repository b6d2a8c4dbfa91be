from librarysite.core.images import NO_IMAGE, PORTRAIT_PLACEHOLDER, ImageResolver


def test_missing_path_resolves_to_no_image():
    resolver = ImageResolver("http://backend.test")
    assert resolver.resolve(None) is NO_IMAGE
    assert resolver.resolve("") is NO_IMAGE
    assert not NO_IMAGE


def test_relative_path_is_joined_to_origin():
    resolver = ImageResolver("http://backend.test/")
    assert resolver.resolve("/uploads/x.jpg") == "http://backend.test/uploads/x.jpg"
    assert resolver.resolve("uploads/x.jpg") == "http://backend.test/uploads/x.jpg"


def test_absolute_url_passes_through():
    resolver = ImageResolver("http://backend.test")
    assert resolver.resolve("https://cdn.example/x.jpg") == "https://cdn.example/x.jpg"


def test_resolve_or_falls_back_to_placeholder():
    resolver = ImageResolver("http://backend.test")
    assert resolver.resolve_or(None) == PORTRAIT_PLACEHOLDER
    assert resolver.resolve_or("/uploads/a.jpg") == "http://backend.test/uploads/a.jpg"
