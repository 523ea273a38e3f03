"""Database client capabilities.

Two client types wrap the shared SQLAlchemy session. ``RlsClient`` is bound to
the calling subject and stands for the anonymous-key connection that is
subject to row-level security. ``ServiceClient`` stands for the service-key
connection and is the only client accepted by server-initiated operations.
"""
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from leaguefindr.app import db
from leaguefindr.errors import PersistenceFailure


class _Client:
    def __init__(self, session):
        self.session = session

    def commit(self):
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            current_app.logger.error(f'database commit failed: {exc}')
            raise PersistenceFailure() from exc

    def rollback(self):
        self.session.rollback()


class RlsClient(_Client):
    def __init__(self, session, subject):
        super().__init__(session)
        self.subject = subject


class ServiceClient(_Client):
    pass


def rls_client(subject):
    return RlsClient(db.session, subject)


def service_client():
    return ServiceClient(db.session)


def require_service(client, operation):
    if not isinstance(client, ServiceClient):
        raise TypeError(f'{operation} requires the service client')
