"""
Tests for the Mailer / DynMailer interfaces

Tests cover:
- Dynamic form delegating to the static form
- Error erasure (message, details and cause preserved)
- Behavioural parity between both forms
- Unrelated exceptions passing through unchanged
"""
from typing import List

import pytest

from async_mailer import DynMailer, DynMailerAdapter, DynMailerError, Mailer, Message
from async_mailer.utils.errors import MailerError


class RecorderError(MailerError):
    user_message = "Recorder failed"


class RecordingMailer(Mailer[RecorderError]):
    """Mailer recording messages, failing on demand"""

    error_type = RecorderError

    def __init__(self, fail_with: Exception | None = None):
        self.sent: List[Message] = []
        self.fail_with = fail_with
        self.closed = False

    async def send_mail(self, message: Message) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(message)

    async def aclose(self) -> None:
        self.closed = True

    def __repr__(self) -> str:
        return "RecordingMailer()"


class TestDynMailerAdapter:
    """Tests for DynMailerAdapter"""

    def test_new_dyn_returns_adapter(self):
        mailer = RecordingMailer()
        dyn = mailer.new_dyn()

        assert isinstance(dyn, DynMailer)
        assert isinstance(dyn, DynMailerAdapter)
        assert dyn.inner is mailer

    @pytest.mark.asyncio
    async def test_delegates_send(self, message):
        mailer = RecordingMailer()
        await mailer.new_dyn().send_mail(message)

        assert mailer.sent == [message]

    @pytest.mark.asyncio
    async def test_error_is_erased(self, message):
        original = RecorderError("upstream said no", details={"status_code": 401})
        dyn = RecordingMailer(fail_with=original).new_dyn()

        with pytest.raises(DynMailerError) as exc_info:
            await dyn.send_mail(message)

        erased = exc_info.value
        assert str(erased) == "upstream said no"
        assert erased.__cause__ is original
        assert erased.source is original
        assert erased.details["status_code"] == 401
        assert erased.details["error_type"] == "RecorderError"

    @pytest.mark.asyncio
    async def test_unrelated_exceptions_pass_through(self, message):
        dyn = RecordingMailer(fail_with=KeyError("bug")).new_dyn()

        with pytest.raises(KeyError):
            await dyn.send_mail(message)

    @pytest.mark.asyncio
    async def test_aclose_delegates(self):
        mailer = RecordingMailer()
        await mailer.new_dyn().aclose()

        assert mailer.closed is True

    def test_repr_names_inner_mailer(self):
        assert repr(RecordingMailer().new_dyn()) == "DynMailer(RecordingMailer())"


class TestFormParity:
    """Static and dynamic forms agree on outcomes"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fail", [False, True])
    async def test_same_outcome(self, message, fail):
        error = RecorderError("boom") if fail else None
        mailer = RecordingMailer(fail_with=error)

        static_failed = False
        try:
            await mailer.send_mail(message)
        except RecorderError:
            static_failed = True

        dyn_failed = False
        try:
            await mailer.new_dyn().send_mail(message)
        except DynMailerError:
            dyn_failed = True

        assert static_failed is dyn_failed is fail

    @pytest.mark.asyncio
    async def test_sending_twice_delivers_twice(self, message):
        mailer = RecordingMailer()
        dyn = mailer.new_dyn()

        await dyn.send_mail(message)
        await dyn.send_mail(message)

        assert len(mailer.sent) == 2


class TestGenericBound:
    """Mailer usable in generic code"""

    @pytest.mark.asyncio
    async def test_generic_function(self, message):
        from typing import TypeVar

        M = TypeVar("M", bound=Mailer)

        async def notify(mailer: M) -> M:
            await mailer.send_mail(message)
            return mailer

        mailer = await notify(RecordingMailer())
        assert mailer.sent == [message]

    def test_mailer_is_abstract(self):
        with pytest.raises(TypeError):
            Mailer()
