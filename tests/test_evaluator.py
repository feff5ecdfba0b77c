import pytest

from mailgallery import Gallery, Metadata
from mailgallery.errors import DefinitionError, MissingTitleError, ValidationError
from mailgallery.evaluator import (
    call_with_fallback,
    detect_capability,
    resolve_artifact,
    resolve_metadata,
    resolve_preview,
    validate_metadata,
)
from mailgallery.models import CallRef, Capability

from support import CountingEmail, OptionsEmail, SimpleOnlyEmail


def declare(target, options=None, **kwargs):
    gallery = Gallery()
    return gallery.preview("/example", target, options, **kwargs)


def test_resolve_metadata_is_memoized():
    target = CountingEmail()
    preview = declare(target)

    first = resolve_metadata(preview)
    second = resolve_metadata(first)

    assert second is first
    assert second.metadata == Metadata(title="Counted")
    assert target.calls["preview_details"] == 1
    # the declared preview itself is left untouched
    assert preview.metadata is None


def test_resolve_artifact_is_memoized():
    target = CountingEmail()
    first = resolve_artifact(declare(target))
    assert resolve_artifact(first) is first
    assert first.artifact.subject == "Counted"
    assert target.calls == {"preview": 1, "preview_details": 0}


def test_resolve_preview_resolves_both():
    preview = resolve_preview(declare(OptionsEmail, {"locale": "de"}))
    assert preview.artifact.subject == "Hallo"
    assert preview.metadata.title == "Email mit Optionen"
    assert preview.metadata.tags == (("locale", "de"), ("options", "yes"))


def test_simple_target_with_options_falls_back_to_zero_arguments():
    preview = resolve_artifact(declare(SimpleOnlyEmail, {"locale": "fr"}))
    assert preview.artifact.subject == "Simple"
    assert resolve_metadata(preview).metadata.title == "Simple"


def test_configurable_target_receives_options():
    preview = resolve_preview(declare(OptionsEmail, {"locale": "fr"}))
    assert preview.artifact.subject == "Bonjour"
    assert "('locale', 'fr')" in preview.artifact.html_body


def test_configurable_target_without_options_uses_zero_argument_form():
    calls = []

    class Recorder:
        @staticmethod
        def preview(*args):
            calls.append(args)
            return "email"

        @staticmethod
        def preview_details(*args):
            return {"title": "Recorder"}

    preview = declare(Recorder)
    assert preview.producer.capability is Capability.CONFIGURABLE
    resolve_artifact(preview)
    assert calls == [()]


def test_errors_raised_by_preview_functions_propagate():
    class Broken:
        @staticmethod
        def preview(options=None):
            raise TypeError("fixture is broken")

        @staticmethod
        def preview_details():
            raise KeyError("missing fixture")

    preview = declare(Broken, {"locale": "fr"})
    with pytest.raises(TypeError, match="fixture is broken"):
        resolve_artifact(preview)
    with pytest.raises(KeyError):
        resolve_metadata(preview)


def test_call_with_fallback_dispatches_on_capability():
    seen = []

    class Target:
        @staticmethod
        def preview(options=None):
            seen.append(options)

    call_with_fallback(CallRef(Target, "preview", (("a", 1),), Capability.CONFIGURABLE))
    call_with_fallback(CallRef(Target, "preview", (("a", 1),), Capability.SIMPLE))
    call_with_fallback(CallRef(Target, "preview", (), Capability.CONFIGURABLE))
    assert seen == [(("a", 1),), None, None]


def test_detect_capability():
    def simple():
        pass

    def configurable(options=None):
        pass

    def keyword_only(*, options=None):
        pass

    def required(options):
        pass

    assert detect_capability(simple) is Capability.SIMPLE
    assert detect_capability(configurable) is Capability.CONFIGURABLE
    assert detect_capability(keyword_only) is Capability.SIMPLE
    assert detect_capability(configurable, "simple") is Capability.SIMPLE
    def two_required(options, locale):
        pass

    assert detect_capability(required, options=(("locale", "fr"),)) is Capability.CONFIGURABLE
    assert (
        detect_capability(required, "configurable", (("locale", "fr"),))
        is Capability.CONFIGURABLE
    )
    with pytest.raises(DefinitionError, match="requires options"):
        detect_capability(required)
    with pytest.raises(DefinitionError, match="without arguments"):
        detect_capability(required, "simple", (("locale", "fr"),))
    with pytest.raises(DefinitionError, match="without arguments"):
        detect_capability(two_required, options=(("locale", "fr"),))


def test_missing_title_raises_dedicated_error():
    preview = declare(CountingEmail(details={"description": "No title here"}))
    with pytest.raises(MissingTitleError) as excinfo:
        resolve_metadata(preview)
    message = str(excinfo.value)
    assert "title" in message
    assert 'return {"title": "Welcome email"}' in message
    assert isinstance(excinfo.value, ValidationError)


def test_validate_metadata_defaults_and_shapes():
    assert validate_metadata({"title": "Welcome"}) == Metadata(title="Welcome", tags=())
    assert validate_metadata([("title", "Welcome"), ("tags", [("a", "b")])]) == Metadata(
        title="Welcome", tags=(("a", "b"),)
    )
    existing = Metadata(title="Kept")
    assert validate_metadata(existing) is existing


@pytest.mark.parametrize(
    "details",
    [
        {"title": "Welcome", "subject": "unexpected"},
        "Welcome",
        None,
        ["title"],
        {"title": 42},
        {"title": "Welcome", "description": ["not", "text"]},
        {"title": "Welcome", "tags": "yes"},
    ],
)
def test_validate_metadata_rejects_bad_shapes(details):
    with pytest.raises(ValidationError):
        validate_metadata(details)


@pytest.mark.parametrize("details", [{}, {"title": ""}, {"description": "x"}])
def test_validate_metadata_requires_title(details):
    with pytest.raises(MissingTitleError):
        validate_metadata(details, source="example.preview_details")


def test_unknown_declared_capability_is_a_definition_error():
    with pytest.raises(DefinitionError, match="Unknown capability"):
        declare(OptionsEmail, producer="sometimes")
