"""
Tests for soft delete on SQLAlchemy models.

Tests cover the mixin, the SQLAlchemy adapter, visibility scopes of hidden
and visible record types, store event ordering and bulk operations against an
in-memory SQLite database.
"""

from datetime import datetime

import pytest
from sqlalchemy import Column, DateTime, Integer, String, create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from tombstone.soft_delete import (
    HookOutcome,
    RecordNotRestored,
    RecordNotSoftDeleted,
    SoftDeleteConfigurationError,
    SoftDeleteError,
    SoftDeleteMixin,
    SoftDeleteOptions,
    WriteAborted,
    kept,
    register_record_type,
    soft_deletable,
    soft_deleted,
)

pytestmark = pytest.mark.soft_delete

# Hook invocations recorded by the test models, reset per test
EVENTS = []


def guard_locked(record):
    """Abort transitions of records whose title starts with 'locked'."""
    EVENTS.append(f"type:before:{record.title}")
    if record.title.startswith("locked"):
        return HookOutcome.ABORT
    return HookOutcome.ALLOW


def observe(record):
    EVENTS.append(f"type:after:{record.title}")


Base = declarative_base()


@soft_deletable(
    column="removed_at",
    without_default_scope=True,
    before_soft_delete=[guard_locked],
    after_soft_delete=[observe],
    before_restore=[guard_locked],
    after_restore=[observe],
)
class Post(Base, SoftDeleteMixin):
    """Visible record type with a custom marker column."""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True)
    title = Column(String(100))
    removed_at = Column(DateTime(timezone=True), nullable=True)


@soft_deletable(after_soft_delete=[observe], after_restore=[observe])
class Document(Base, SoftDeleteMixin):
    """Hidden record type using the default marker column."""

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True)
    title = Column(String(100))
    deleted_at = Column(DateTime(timezone=True), nullable=True)


@soft_deletable(
    skip_orm_events=False,
    before_soft_delete=[guard_locked],
    after_soft_delete=[observe],
)
class Ledger(Base, SoftDeleteMixin):
    """Record type whose marker writes fire mapper update events."""

    __tablename__ = "ledgers"

    id = Column(Integer, primary_key=True)
    title = Column(String(100))
    deleted_at = Column(DateTime(timezone=True), nullable=True)


@event.listens_for(Ledger, "before_update")
def ledger_before_update(mapper, connection, target):
    EVENTS.append("store:before_update")
    if target.title == "frozen":
        raise WriteAborted("ledger is frozen", record=target)


@event.listens_for(Ledger, "after_update")
def ledger_after_update(mapper, connection, target):
    EVENTS.append("store:after_update")


@event.listens_for(Post, "before_update")
def post_before_update(mapper, connection, target):
    EVENTS.append("store:before_update")


PAST = datetime(2017, 1, 1)


@pytest.fixture(autouse=True)
def clear_events():
    EVENTS.clear()
    yield
    EVENTS.clear()


@pytest.fixture
def db_session():
    """Create an in-memory SQLite database session for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    Session = sessionmaker(bind=engine)
    session = Session()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def post(db_session):
    """Create a kept post."""
    post = Post(title="My very first post")
    db_session.add(post)
    db_session.commit()
    EVENTS.clear()
    return post


@pytest.fixture
def removed_post(db_session):
    """Create a post soft deleted in the past."""
    post = Post(title="A soft deleted post", removed_at=PAST)
    db_session.add(post)
    db_session.commit()
    EVENTS.clear()
    return post


def _stored_marker(session, model, record_id, column):
    """Read the marker straight from the table."""
    table = model.__table__
    return session.execute(
        table.select().where(table.c.id == record_id)
    ).mappings().one()[column]


class TestSoftDeleteMixin:
    """Test single record transitions through the mixin."""

    def test_soft_delete_basic(self, db_session, post):
        """Test soft delete sets the marker in memory and in the table."""
        assert post.soft_delete() is True

        assert post.removed_at is not None
        assert post.is_soft_deleted is True
        assert post.is_kept is False
        assert _stored_marker(db_session, Post, post.id, "removed_at") is not None

    def test_soft_delete_runs_hooks_in_order(self, db_session, post):
        """Test guards run before and observers after the write."""
        post.soft_delete()

        assert EVENTS == [
            "type:before:My very first post",
            "type:after:My very first post",
        ]

    def test_soft_delete_skips_store_events_by_default(self, db_session, post):
        """Test the default single-field write fires no mapper events."""
        post.soft_delete()

        assert "store:before_update" not in EVENTS
        assert post not in db_session.dirty

    def test_second_soft_delete_is_noop(self, db_session, post):
        """Test soft deleting twice leaves the marker unchanged."""
        post.soft_delete()
        marker = post.removed_at
        EVENTS.clear()

        assert post.soft_delete() is False
        assert post.removed_at == marker
        assert EVENTS == []

    def test_soft_delete_already_removed(self, db_session, removed_post):
        """Test soft deleting a removed record changes nothing."""
        assert removed_post.soft_delete() is False
        assert removed_post.removed_at == PAST

    def test_soft_delete_or_raise_already_removed(self, db_session, removed_post):
        """Test the raising form carries the record."""
        with pytest.raises(RecordNotSoftDeleted) as exc:
            removed_post.soft_delete_or_raise()

        assert exc.value.record is removed_post
        assert "Failed to soft delete the record" in str(exc.value)

    def test_guard_abort(self, db_session):
        """Test an aborting guard prevents the write and the observers."""
        post = Post(title="locked post")
        db_session.add(post)
        db_session.commit()
        EVENTS.clear()

        assert post.soft_delete() is False
        assert post.removed_at is None
        assert EVENTS == ["type:before:locked post"]

        with pytest.raises(RecordNotSoftDeleted):
            post.soft_delete_or_raise()

    def test_direct_soft_delete_skips_hooks(self, db_session):
        """Test soft_delete(hooks=False) ignores guards and observers."""
        post = Post(title="locked post")
        db_session.add(post)
        db_session.commit()
        EVENTS.clear()

        assert post.soft_delete(hooks=False) is True
        assert post.is_soft_deleted is True
        assert EVENTS == []

    def test_restore_basic(self, db_session, removed_post):
        """Test restore clears the marker in memory and in the table."""
        assert removed_post.restore() is True

        assert removed_post.removed_at is None
        assert removed_post.is_kept is True
        assert _stored_marker(db_session, Post, removed_post.id, "removed_at") is None
        assert removed_post.restore() is False

    def test_restore_or_raise_kept(self, db_session, post):
        """Test restoring a kept record raises."""
        with pytest.raises(RecordNotRestored) as exc:
            post.restore_or_raise()

        assert exc.value.record is post

    def test_direct_restore(self, db_session, removed_post):
        """Test restore(hooks=False) clears the marker without hooks."""
        assert removed_post.restore(hooks=False) is True
        assert removed_post.removed_at is None
        assert EVENTS == []

    def test_round_trip(self, db_session, post):
        """Test soft delete then restore leaves no residual state."""
        post.soft_delete()
        post.restore()
        db_session.commit()

        assert post.removed_at is None
        assert _stored_marker(db_session, Post, post.id, "removed_at") is None

    def test_custom_column_scenario(self, db_session):
        """Test soft delete then restore_or_raise on a removed_at column."""
        post = Post(title="Scenario", removed_at=None)
        db_session.add(post)
        db_session.commit()

        assert post.soft_delete() is True
        assert post.removed_at is not None
        assert post.is_soft_deleted is True

        assert post.restore_or_raise() is True
        assert post.removed_at is None

    def test_transient_record(self):
        """Test writing the marker of an unsaved record fails loudly."""
        with pytest.raises(SoftDeleteError):
            Post(title="Unsaved").soft_delete()


class TestStoreEvents:
    """Test marker writes that go through mapper update events."""

    def test_event_ordering(self, db_session):
        """Test type hooks wrap the store's update events."""
        ledger = Ledger(title="Q1")
        db_session.add(ledger)
        db_session.commit()
        EVENTS.clear()

        assert ledger.soft_delete() is True
        assert EVENTS == [
            "type:before:Q1",
            "store:before_update",
            "store:after_update",
            "type:after:Q1",
        ]

    def test_store_veto(self, db_session):
        """Test a store listener raising WriteAborted returns False."""
        ledger = Ledger(title="frozen")
        db_session.add(ledger)
        db_session.commit()
        EVENTS.clear()

        assert ledger.soft_delete() is False
        assert EVENTS == ["type:before:frozen", "store:before_update"]
        assert ledger.deleted_at is None
        assert _stored_marker(db_session, Ledger, ledger.id, "deleted_at") is None

    def test_session_usable_after_veto(self, db_session):
        """Test the session keeps working after a vetoed write."""
        frozen = Ledger(title="frozen")
        other = Ledger(title="Q2")
        db_session.add_all([frozen, other])
        db_session.commit()

        frozen.soft_delete()

        assert other.soft_delete() is True
        db_session.commit()
        assert other.is_soft_deleted is True

    def test_veto_keeps_pending_work(self, db_session):
        """Test a vetoed write leaves unrelated uncommitted work in place."""
        frozen = Ledger(title="frozen")
        db_session.add(frozen)
        db_session.commit()

        other = Post(title="Written before the veto")
        db_session.add(other)
        db_session.flush()

        assert frozen.soft_delete() is False
        assert other in db_session

        db_session.commit()
        assert _stored_marker(db_session, Post, other.id, "removed_at") is None
        assert db_session.query(Post).all() == [other]

    def test_veto_on_record_inserted_in_transaction(self, db_session):
        """Test a vetoed write restores the marker of an uncommitted record."""
        frozen = Ledger(title="frozen")
        db_session.add(frozen)
        db_session.flush()
        EVENTS.clear()

        assert frozen.soft_delete() is False
        assert frozen.deleted_at is None
        assert frozen.is_kept is True
        assert frozen in db_session

        db_session.commit()
        assert _stored_marker(db_session, Ledger, frozen.id, "deleted_at") is None

    def test_direct_write_skips_store_events(self, db_session):
        """Test hooks=False bypasses mapper events even with hooked writes."""
        ledger = Ledger(title="Q3")
        db_session.add(ledger)
        db_session.commit()
        EVENTS.clear()

        assert ledger.soft_delete(hooks=False) is True
        assert EVENTS == []


class TestVisibleScopes:
    """Test scopes of a type registered without_default_scope."""

    def test_kept_record(self, db_session, post):
        assert db_session.query(Post).all() == [post]
        assert Post.query_kept(db_session).all() == [post]
        assert Post.query_soft_deleted(db_session).all() == []
        assert Post.query_with_soft_deleted(db_session).all() == [post]

    def test_removed_record(self, db_session, removed_post):
        assert db_session.query(Post).all() == [removed_post]
        assert Post.query_kept(db_session).all() == []
        assert Post.query_soft_deleted(db_session).all() == [removed_post]
        assert Post.query_with_soft_deleted(db_session).all() == [removed_post]

    def test_mixed_table(self, db_session, post, removed_post):
        """Test each view filters a table holding both states."""
        everything = db_session.query(Post).order_by(Post.id).all()

        assert everything == [post, removed_post]
        assert Post.query_kept(db_session).all() == [post]
        assert Post.query_soft_deleted(db_session).all() == [removed_post]
        assert (
            Post.query_with_soft_deleted(db_session).order_by(Post.id).all()
            == everything
        )


class TestHiddenScopes:
    """Test scopes of a type with the default kept scope."""

    @pytest.fixture
    def documents(self, db_session):
        live = Document(title="live")
        gone = Document(title="gone", deleted_at=PAST)
        db_session.add_all([live, gone])
        db_session.commit()
        return live, gone

    def test_base_view_hides_removed(self, db_session, documents):
        live, _ = documents

        assert db_session.query(Document).all() == [live]

    def test_kept(self, db_session, documents):
        live, _ = documents

        assert Document.query_kept(db_session).all() == [live]

    def test_soft_deleted_lifts_implicit_filter(self, db_session, documents):
        _, gone = documents

        assert Document.query_soft_deleted(db_session).all() == [gone]

    def test_with_soft_deleted(self, db_session, documents):
        live, gone = documents

        result = Document.query_with_soft_deleted(db_session).order_by(Document.id)
        assert result.all() == [live, gone]

    def test_scopes_compose_with_filters(self, db_session, documents):
        _, gone = documents
        query = db_session.query(Document).filter(Document.title == "gone")

        assert kept(Document, query).all() == []
        assert soft_deleted(Document, query).all() == [gone]

    def test_soft_deleted_record_disappears(self, db_session, documents):
        live, gone = documents

        live.soft_delete()
        db_session.commit()

        assert db_session.query(Document).all() == []
        assert len(Document.query_soft_deleted(db_session).all()) == 2

    def test_removed_record_attributes_still_load(self, db_session, documents):
        _, gone = documents
        db_session.expire_all()

        assert gone.title == "gone"
        assert gone.is_soft_deleted is True


class TestBulkOperations:
    """Test bulk transitions over whole tables."""

    @pytest.fixture
    def posts(self, db_session):
        posts = [Post(title=f"Post {i}") for i in range(3)]
        db_session.add_all(posts)
        db_session.commit()
        EVENTS.clear()
        return posts

    def test_hooked_soft_delete_all(self, db_session, posts):
        acted = Post.soft_delete_all(db_session)

        assert sorted(p.id for p in acted) == sorted(p.id for p in posts)
        assert all(p.is_soft_deleted for p in posts)
        assert len([e for e in EVENTS if e.startswith("type:after")]) == 3

    def test_direct_soft_delete_all(self, db_session, posts):
        count = Post.soft_delete_all(db_session, hooks=False)
        db_session.expire_all()

        assert count == 3
        assert all(p.is_soft_deleted for p in posts)
        assert EVENTS == []

    def test_direct_soft_delete_all_keeps_existing_markers(
        self, db_session, posts, removed_post
    ):
        count = Post.soft_delete_all(db_session, hooks=False)
        db_session.expire_all()

        assert count == 3
        assert removed_post.removed_at == PAST

    def test_hooked_soft_delete_all_isolates_aborts(self, db_session, posts):
        locked = Post(title="locked post")
        db_session.add(locked)
        db_session.commit()

        Post.soft_delete_all(db_session)

        assert all(p.is_soft_deleted for p in posts)
        assert locked.is_kept is True

    def test_soft_delete_all_or_raise(self, db_session, posts):
        locked = Post(title="locked post")
        db_session.add(locked)
        db_session.commit()

        with pytest.raises(RecordNotSoftDeleted) as exc:
            Post.soft_delete_all_or_raise(db_session)

        assert exc.value.record is locked
        assert all(p.is_soft_deleted for p in posts)

    def test_hooked_restore_all(self, db_session, posts):
        Post.soft_delete_all(db_session, hooks=False)
        db_session.expire_all()

        acted = Post.restore_all(db_session)

        assert len(acted) == 3
        assert all(p.is_kept for p in posts)

    def test_restore_all_or_raise(self, db_session, posts):
        Post.soft_delete_all(db_session, hooks=False)
        db_session.expire_all()

        assert len(Post.restore_all_or_raise(db_session)) == 3

    def test_direct_restore_all_hidden_type(self, db_session):
        documents = [Document(title=f"Doc {i}") for i in range(2)]
        db_session.add_all(documents)
        db_session.commit()

        assert Document.soft_delete_all(db_session, hooks=False) == 2
        db_session.expire_all()
        assert db_session.query(Document).all() == []

        assert Document.restore_all(db_session, hooks=False) == 2
        db_session.expire_all()
        assert len(Document.query_kept(db_session).all()) == 2

    def test_hooked_restore_all_hidden_type(self, db_session):
        documents = [Document(title=f"Doc {i}", deleted_at=PAST) for i in range(2)]
        db_session.add_all(documents)
        db_session.commit()
        EVENTS.clear()

        acted = Document.restore_all(db_session)

        assert len(acted) == 2
        assert EVENTS == ["type:after:Doc 0", "type:after:Doc 1"]
        assert len(db_session.query(Document).all()) == 2


class TestRegistration:
    """Test registration of SQLAlchemy models."""

    def test_missing_marker_column(self):
        LocalBase = declarative_base()

        class Widget(LocalBase):
            __tablename__ = "widgets"
            id = Column(Integer, primary_key=True)

        with pytest.raises(SoftDeleteConfigurationError) as exc:
            register_record_type(Widget, SoftDeleteOptions())

        assert "deleted_at" in str(exc.value)

    def test_unmapped_class(self):
        class Plain:
            deleted_at = None

        with pytest.raises(SoftDeleteConfigurationError):
            register_record_type(Plain, SoftDeleteOptions())

    def test_options_validation(self):
        with pytest.raises(ValueError):
            SoftDeleteOptions(column="not a column")

        with pytest.raises(ValueError):
            SoftDeleteOptions(column="class")

    def test_option_defaults(self):
        options = SoftDeleteOptions()

        assert options.column == "deleted_at"
        assert options.without_default_scope is False
        assert options.skip_orm_events is True
        assert options.default_visibility == "hidden"
        assert options.hooked_writes is False

    def test_options_are_frozen(self):
        options = SoftDeleteOptions()

        with pytest.raises(Exception):
            options.column = "removed_at"
