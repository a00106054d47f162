"""
Typed lifecycle events.

One event class per transition that notifies someone. Each event carries
either a direct recipient or a region audience, plus title, body and a
JSON-serializable data payload, so it can cross the Celery boundary.
"""


class LifecycleEvent:
    """Base class; subclasses set event_type and provide constructors."""

    event_type = None

    def __init__(self, title, body, data=None, recipient_id=None,
                 region_ids=None, exclude_user_ids=None):
        if recipient_id is None and not region_ids:
            raise ValueError(f"{self.__class__.__name__} needs a recipient or a region audience")
        self.title = title
        self.body = body
        self.data = data or {}
        self.recipient_id = recipient_id
        self.region_ids = list(region_ids or [])
        self.exclude_user_ids = list(exclude_user_ids or [])

    @property
    def is_broadcast(self):
        return self.recipient_id is None

    def to_payload(self) -> dict:
        return {
            'type': self.event_type,
            'title': self.title,
            'body': self.body,
            'data': self.data,
            'recipient_id': str(self.recipient_id) if self.recipient_id is not None else None,
            'region_ids': self.region_ids,
            'exclude_user_ids': [str(user_id) for user_id in self.exclude_user_ids],
        }

    def __repr__(self):
        target = f"regions={self.region_ids}" if self.is_broadcast else f"recipient={self.recipient_id}"
        return f"<{self.__class__.__name__} {target}>"


def _announcement_data(announcement, **extra):
    data = {'announcement_id': str(announcement.id)}
    data.update(extra)
    return data


class AnnouncementPublished(LifecycleEvent):
    event_type = 'announcement_published'

    @classmethod
    def for_owner(cls, announcement):
        return cls(
            title='Announcement Published',
            body=f'Your announcement "{announcement.summary_text()}" has been approved and published.',
            data=_announcement_data(announcement),
            recipient_id=announcement.owner_id,
        )

    @classmethod
    def for_regions(cls, announcement, region_ids):
        return cls(
            title='New Announcement in Your Region',
            body=f'New announcement: "{announcement.summary_text()}"',
            data=_announcement_data(announcement, category=announcement.category),
            region_ids=region_ids,
            exclude_user_ids=[announcement.owner_id],
        )


class AnnouncementBlocked(LifecycleEvent):
    event_type = 'announcement_blocked'

    @classmethod
    def for_owner(cls, announcement):
        return cls(
            title='Announcement Blocked',
            body=f'Your announcement "{announcement.summary_text()}" has been blocked by an administrator.',
            data=_announcement_data(announcement),
            recipient_id=announcement.owner_id,
        )


class AnnouncementClosed(LifecycleEvent):
    event_type = 'announcement_closed'

    @classmethod
    def for_owner(cls, announcement, system=False):
        if system:
            body = f'Your announcement "{announcement.summary_text()}" has expired and was closed automatically.'
        else:
            body = f'Your announcement "{announcement.summary_text()}" has been closed by an administrator.'
        return cls(
            title='Announcement Closed',
            body=body,
            data=_announcement_data(announcement, system=system),
            recipient_id=announcement.owner_id,
        )


def _application_data(application):
    return {
        'announcement_id': str(application.announcement_id),
        'application_id': str(application.id),
    }


class ApplicationCreated(LifecycleEvent):
    event_type = 'application_created'

    @classmethod
    def for_owner(cls, application):
        announcement = application.announcement
        return cls(
            title='New Application',
            body=f'New application received for your announcement "{announcement.summary_text()}".',
            data=_application_data(application),
            recipient_id=announcement.owner_id,
        )


class ApplicationApproved(LifecycleEvent):
    event_type = 'application_approved'

    @classmethod
    def for_applicant(cls, application):
        return cls(
            title='Application Approved',
            body=f'Your application for "{application.announcement.summary_text()}" has been approved.',
            data=_application_data(application),
            recipient_id=application.applicant_id,
        )


class ApplicationRejected(LifecycleEvent):
    event_type = 'application_rejected'

    @classmethod
    def for_applicant(cls, application):
        return cls(
            title='Application Rejected',
            body=f'Your application for "{application.announcement.summary_text()}" has been rejected.',
            data=_application_data(application),
            recipient_id=application.applicant_id,
        )


class ApplicationClosed(LifecycleEvent):
    event_type = 'application_closed'

    @classmethod
    def for_applicant(cls, application):
        return cls(
            title='Application Closed',
            body=f'Your application for "{application.announcement.summary_text()}" has been closed.',
            data=_application_data(application),
            recipient_id=application.applicant_id,
        )
