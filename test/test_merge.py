"""
Tests for the import review state machine and the merge steps.
"""

import copy

import pytest
from sqlalchemy.exc import SQLAlchemyError

from bookmark_profiles.profiles.user_profile import (
    DEFAULT_FOLDER_STYLE,
    DEFAULT_MAIN_SETTINGS,
    ROOT_FOLDER_ID,
)
from bookmark_profiles.transfer.assembler import ExportAssembler
from bookmark_profiles.transfer.bookmarks import collect_ids, iter_nodes
from bookmark_profiles.transfer.categories import Category
from bookmark_profiles.transfer.crypto import CryptoCodec
from bookmark_profiles.transfer.document import ExportDocument, ValidationResult
from bookmark_profiles.transfer.exceptions import (
    DecryptionFailure,
    InvalidSessionStateError,
    MergeApplyError,
    NothingSelectedError,
    NotRecognizedExportError,
    PersistFailedError,
    SessionBusyError,
    UnsupportedFormatError,
)
from bookmark_profiles.transfer.merge import (
    ImportSession,
    ImportState,
    MergeDecisionEngine,
    MergeSide,
)
from bookmark_profiles.transfer.validator import PROFILE_SCHEMA_NAME

from conftest import SEED_USER_ID


class StaticValidator:
    """Accepts every candidate as the given document."""

    def __init__(self, document: ExportDocument) -> None:
        self.document = document

    def validate(self, candidate, schema_name=PROFILE_SCHEMA_NAME):
        return ValidationResult(valid_object=self.document)


@pytest.fixture
def merge_engine(store, config):
    return MergeDecisionEngine(store, transfer=config.transfer)


@pytest.fixture
def export_text(config, store):
    assembler = ExportAssembler(environment=config.environment, transfer=config.transfer)

    def make(*tags, password=""):
        document = assembler.assemble(store.snapshot(), {tag: True for tag in tags}, "backup")
        return CryptoCodec().encode(document, password)

    return make


def _loaded(engine, text, password=None):
    session = engine.load(ImportSession(), text)
    if password is not None:
        engine.submit_password(session, password)
    return session


def test_plain_import_goes_straight_to_selection(merge_engine, export_text):
    session = _loaded(merge_engine, export_text(Category.USER_SETTINGS))

    assert session.state is ImportState.AWAITING_SELECTION
    selection = session.selections[Category.USER_SETTINGS]
    assert selection.apply_to_current and not selection.apply_to_new and selection.locked


def test_encrypted_import_waits_for_password(merge_engine, export_text):
    session = merge_engine.load(ImportSession(), export_text(Category.USER_SETTINGS, password="s3cret"))
    assert session.state is ImportState.AWAITING_PASSWORD

    with pytest.raises(DecryptionFailure):
        merge_engine.submit_password(session, "wrong")
    assert session.state is ImportState.AWAITING_PASSWORD

    merge_engine.submit_password(session, "s3cret")
    assert session.state is ImportState.AWAITING_SELECTION


def test_whole_profile_defaults_to_new(merge_engine, export_text):
    session = _loaded(merge_engine, export_text(Category.ALL_PROFILES))
    selection = session.selections[Category.ALL_PROFILES]

    assert selection.apply_to_new and not selection.apply_to_current and selection.locked


def test_load_errors_put_session_in_error(merge_engine):
    session = ImportSession()
    with pytest.raises(UnsupportedFormatError):
        merge_engine.load(session, "plain old notes")
    assert session.state is ImportState.ERROR

    with pytest.raises(NotRecognizedExportError):
        merge_engine.load(session, '{"hello": "world"}')
    assert session.state is ImportState.ERROR
    assert isinstance(session.error, NotRecognizedExportError)


def test_session_can_restart_after_error(merge_engine, export_text):
    session = ImportSession()
    with pytest.raises(UnsupportedFormatError):
        merge_engine.load(session, "plain old notes")

    merge_engine.load(session, export_text(Category.USER_SETTINGS))
    assert session.state is ImportState.AWAITING_SELECTION
    assert session.error is None


def test_busy_session_rejects_load(merge_engine, export_text):
    session = ImportSession(state=ImportState.VALIDATING)
    with pytest.raises(SessionBusyError):
        merge_engine.load(session, export_text(Category.USER_SETTINGS))


def test_steps_out_of_order_are_rejected(merge_engine):
    with pytest.raises(InvalidSessionStateError):
        merge_engine.submit_password(ImportSession(), "pw")
    with pytest.raises(InvalidSessionStateError):
        merge_engine.apply(ImportSession())
    with pytest.raises(InvalidSessionStateError):
        merge_engine.toggle(ImportSession(), Category.USER_SETTINGS, MergeSide.CURRENT, False)


def test_wrong_side_produces_notice(merge_engine, export_text):
    session = _loaded(merge_engine, export_text(Category.CURRENT_BOOKMARKS))
    notice = merge_engine.toggle(session, Category.CURRENT_BOOKMARKS, MergeSide.NEW, True)

    assert notice is not None
    assert "current profile" in notice.message
    assert session.notices == [notice]
    assert not session.selections[Category.CURRENT_BOOKMARKS].apply_to_new


def test_whole_profile_on_current_produces_notice(merge_engine, export_text):
    session = _loaded(merge_engine, export_text(Category.CURRENT_ALL_PROFILE))
    notice = merge_engine.toggle(session, "currentAllProfile", "applyToCurrent", True)

    assert "new profile" in notice.message
    assert not session.selections[Category.CURRENT_ALL_PROFILE].apply_to_current


def test_locked_destination_produces_notice(merge_engine, export_text):
    session = _loaded(merge_engine, export_text(Category.USER_SETTINGS))
    notice = merge_engine.toggle(session, Category.USER_SETTINGS, MergeSide.CURRENT, False)

    assert "fixed" in notice.message
    assert session.selections[Category.USER_SETTINGS].apply_to_current


def test_missing_category_produces_notice(merge_engine, export_text):
    session = _loaded(merge_engine, export_text(Category.USER_SETTINGS))
    notice = merge_engine.toggle(session, Category.DEFAULT_FOLDER_STYLE, MergeSide.CURRENT, True)

    assert "not part of this import" in notice.message


def test_editable_destination_can_be_switched_off(store, config, export_text):
    engine = MergeDecisionEngine(store, transfer=config.transfer, editable=True)
    session = _loaded(engine, export_text(Category.USER_SETTINGS))

    assert engine.toggle(session, Category.USER_SETTINGS, MergeSide.CURRENT, False) is None
    with pytest.raises(NothingSelectedError):
        engine.apply(session)
    assert session.state is ImportState.AWAITING_SELECTION


def test_bookmarks_are_grafted_under_root(merge_engine, export_text, store):
    existing_ids = collect_ids(store.get_active_profile().bookmarks)
    session = _loaded(merge_engine, export_text(Category.CURRENT_BOOKMARKS))
    report = merge_engine.apply(session)

    assert report.applied == [Category.CURRENT_BOOKMARKS]
    assert session.state is ImportState.DONE

    tree = store.get_active_profile().bookmarks
    root = tree[0]
    assert root["id"] == ROOT_FOLDER_ID
    assert [child["index"] for child in root["children"]] == [0, 1, 2]

    grafted = root["children"][2]
    assert grafted["parentId"] == ROOT_FOLDER_ID
    assert grafted["title"].startswith("Import ")
    assert grafted["id"] not in existing_ids
    for child in grafted["children"]:
        assert child["parentId"] == grafted["id"]
        assert child["id"] not in existing_ids
        for grandchild in child["children"]:
            assert grandchild["parentId"] == child["id"]

    ids = [node["id"] for node in iter_nodes(tree)]
    assert len(ids) == len(set(ids))


def test_styles_and_settings_are_overwritten(merge_engine, store):
    folder_style = copy.deepcopy(DEFAULT_FOLDER_STYLE)
    folder_style["grid"]["gridAutoFlow"] = "column"
    settings = copy.deepcopy(DEFAULT_MAIN_SETTINGS)
    settings["main"]["theme"] = "light"
    document = ExportDocument()
    document.include(Category.DEFAULT_FOLDER_STYLE, folder_style)
    document.include(Category.USER_SETTINGS, settings)
    session = _loaded(merge_engine, document.to_json())
    merge_engine.apply(session)

    profile = store.get_active_profile()
    assert profile.folder_style == folder_style
    assert profile.main_settings == settings


def test_activity_log_is_appended_without_duplicates(merge_engine, store):
    existing = list(store.get_active_profile().activity_log)
    document = ExportDocument()
    document.include(
        Category.CURRENT_USER_ACTIVITY_LOG,
        existing + [{"action": "deleteProfile", "timestamp": 1}],
    )
    merge_engine.apply(_loaded(merge_engine, document.to_json()))

    log = store.get_active_profile().activity_log
    assert log == existing + [{"action": "deleteProfile", "timestamp": 1}]


def test_whole_profiles_become_new_inactive_profiles(merge_engine, export_text, store, config):
    session = _loaded(merge_engine, export_text(Category.ALL_PROFILES, password="pw"), password="pw")
    report = merge_engine.apply(session)

    assert len(report.created_profiles) == 1
    created = store.repository.get_by_user_id(report.created_profiles[0])
    assert created.user_id != SEED_USER_ID
    assert len(created.user_id) == config.transfer.profile_id_length
    assert created.active is False
    assert store.get_active_profile().user_id == SEED_USER_ID
    assert store.repository.count() == 2


def test_done_session_forgets_document_and_password(merge_engine, export_text):
    session = _loaded(merge_engine, export_text(Category.USER_SETTINGS, password="pw"), password="pw")
    merge_engine.apply(session)

    assert session.state is ImportState.DONE
    assert session.validation is None
    assert session.password == ""
    with pytest.raises(InvalidSessionStateError):
        merge_engine.apply(session)


def test_failed_persist_changes_nothing_and_can_be_retried(merge_engine, export_text, store, monkeypatch):
    session = _loaded(merge_engine, export_text(Category.CURRENT_BOOKMARKS))

    def fail_commit():
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(store.session, "commit", fail_commit)
    with pytest.raises(PersistFailedError):
        merge_engine.apply(session)
    assert session.state is ImportState.AWAITING_SELECTION
    assert len(store.get_active_profile().bookmarks[0]["children"]) == 2

    monkeypatch.undo()
    merge_engine.apply(session)
    assert len(store.get_active_profile().bookmarks[0]["children"]) == 3


def test_raising_persist_changes_nothing_and_can_be_retried(merge_engine, export_text, store, monkeypatch):
    session = _loaded(merge_engine, export_text(Category.CURRENT_BOOKMARKS))

    def broken_persist():
        raise RuntimeError("connection reset")

    monkeypatch.setattr(store, "persist", broken_persist)
    with pytest.raises(PersistFailedError):
        merge_engine.apply(session)
    assert session.state is ImportState.AWAITING_SELECTION
    assert isinstance(session.error, PersistFailedError)
    assert len(store.get_active_profile().bookmarks[0]["children"]) == 2

    monkeypatch.undo()
    merge_engine.apply(session)
    assert session.state is ImportState.DONE
    assert len(store.get_active_profile().bookmarks[0]["children"]) == 3


def test_unexpected_step_error_discards_changes(merge_engine, export_text, store, monkeypatch):
    session = _loaded(merge_engine, export_text(Category.CURRENT_BOOKMARKS, Category.USER_SETTINGS))

    def broken_step(document, report):
        raise RuntimeError("unexpected")

    monkeypatch.setitem(merge_engine._steps, Category.USER_SETTINGS, broken_step)
    with pytest.raises(MergeApplyError):
        merge_engine.apply(session)
    assert session.state is ImportState.AWAITING_SELECTION
    assert len(store.get_active_profile().bookmarks[0]["children"]) == 2


def test_failed_step_discards_earlier_steps(store, config):
    document = ExportDocument()
    document.include(Category.CURRENT_ALL_PROFILE, store.snapshot().active.to_export_dict())
    document.include(Category.CURRENT_BOOKMARKS, ["not a bookmark"])
    engine = MergeDecisionEngine(store, validator=StaticValidator(document), transfer=config.transfer)
    session = _loaded(engine, "{}")

    with pytest.raises(MergeApplyError):
        engine.apply(session)
    assert session.state is ImportState.AWAITING_SELECTION
    assert store.repository.count() == 1
    assert len(store.get_active_profile().bookmarks[0]["children"]) == 2
