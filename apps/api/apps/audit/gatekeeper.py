"""
Mutation gatekeeper for clinical and administrative data.

Every audited model inherits AuditedModel and uses AuditedManager, so each
create/update/upsert must carry the acting user as the out-of-band keyword
``audit_actor``:

    Slot.objects.create(owner=user, start_datetime=..., end_datetime=..., audit_actor=user)
    request.save(update_fields=['status'], audit_actor=user)
    ConsultationRequest.objects.filter(pk=pk).update(status='rejected', audit_actor=user)
    AppSettings.objects.update_or_create(pk=1, defaults={...}, audit_actor=user)

The keyword is stripped before the write reaches the database. A missing
actor raises AuditActorRequired before any SQL is issued.

After a successful write one AuditEvent is scheduled with
transaction.on_commit and handed to a Celery task. Audit writes are
best-effort: failures are logged and counted, never raised, and a write
rolled back by the surrounding transaction leaves no audit trace.

Deletes are rejected for every model except those declaring
``delete_guard_relation`` (Slot). For those a single-row delete succeeds
only while the guard relation is empty, and a bulk delete requires the
queryset to have been narrowed with ``.unlinked()``.
Both issue a single conditional DELETE, so the guard and the delete cannot
be separated by a concurrent booking.
"""
import json
import logging

from django.core.serializers.json import DjangoJSONEncoder
from django.db import IntegrityError, models, router, transaction

from apps.audit.exceptions import (
    AuditActorRequired,
    DeletionForbidden,
    ProtectedRecordDeletion,
    UnsafeBulkDelete,
)
from apps.audit.models import AuditEventTypeChoices
from apps.core.observability import metrics
from apps.core.observability.events import log_audit_write_failed, log_gatekeeper_blocked

logger = logging.getLogger(__name__)

AUDIT_ACTOR_KWARG = 'audit_actor'


class AuditPayloadEncoder(DjangoJSONEncoder):
    """DjangoJSONEncoder that falls back to str() for expressions and model instances."""

    def default(self, o):
        if isinstance(o, models.Model):
            return str(o.pk)
        try:
            return super().default(o)
        except TypeError:
            return str(o)


def to_audit_payload(data):
    """Convert a changes dict into JSON-safe primitives (Celery uses the json serializer)."""
    if data is None:
        return None
    return json.loads(json.dumps(data, cls=AuditPayloadEncoder))


def _is_missing_actor(actor):
    if actor is None or actor == '':
        return True
    if isinstance(actor, models.Model):
        return actor.pk is None
    return actor == 0


def require_actor(model, operation, actor):
    """
    Validate the actor of a mutating call and return its primary key.

    Raises:
        AuditActorRequired: actor is absent, None, 0, '' or an unsaved user
    """
    if _is_missing_actor(actor):
        metrics.gatekeeper_blocked_total.labels(
            entity_type=model._meta.object_name,
            reason='missing_actor'
        ).inc()
        raise AuditActorRequired(
            f'{AUDIT_ACTOR_KWARG} is required for {model._meta.object_name}.{operation}(). '
            f'Pass the acting user, or the SMS service actor for machine-originated writes.'
        )
    return actor.pk if isinstance(actor, models.Model) else actor


def snapshot(instance, field_names=None):
    """Field values of an instance keyed by attname (FKs as ids)."""
    data = {}
    for field in instance._meta.concrete_fields:
        if field_names is not None and field.name not in field_names and field.attname not in field_names:
            continue
        data[field.attname] = getattr(instance, field.attname)
    return data


def dispatch_audit_event(actor_id, event_type, model, entity_id, changes=None, using=None):
    """
    Schedule one AuditEvent for after the current transaction commits.

    Runs immediately when no transaction is open. Never raises.
    """
    entity_type = model._meta.object_name
    payload = {
        'actor_id': str(actor_id),
        'event_type': event_type,
        'entity_type': entity_type,
        'entity_id': str(entity_id),
        'changed_fields': {'changes': to_audit_payload(changes)} if changes is not None else None,
    }

    def _send():
        from apps.audit.tasks import record_audit_event

        try:
            record_audit_event.delay(**payload)
        except Exception as exc:
            metrics.audit_event_write_failed_total.labels(stage='dispatch').inc()
            log_audit_write_failed('dispatch', entity_type, entity_id, event_type, str(exc))

    transaction.on_commit(_send, using=using)


class AuditedQuerySet(models.QuerySet):
    """QuerySet enforcing actor attribution and delete blocking."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._excludes_linked_records = False

    def _clone(self):
        clone = super()._clone()
        clone._excludes_linked_records = self._excludes_linked_records
        return clone

    # -- writes ------------------------------------------------------------

    def create(self, **kwargs):
        actor = kwargs.pop(AUDIT_ACTOR_KWARG, None)
        require_actor(self.model, 'create', actor)
        obj = self.model(**kwargs)
        self._for_write = True
        obj.save(force_insert=True, using=self.db, audit_actor=actor)
        return obj

    def bulk_create(self, objs, *args, audit_actor=None, **kwargs):
        actor_id = require_actor(self.model, 'bulk_create', audit_actor)
        objs = super().bulk_create(objs, *args, **kwargs)
        for obj in objs:
            if obj.pk is not None:
                dispatch_audit_event(
                    actor_id, AuditEventTypeChoices.CREATE, self.model, obj.pk,
                    snapshot(obj), using=self.db
                )
        return objs

    def update(self, audit_actor=None, **kwargs):
        actor_id = require_actor(self.model, 'update', audit_actor)
        with transaction.atomic(using=self.db):
            pks = list(self.values_list('pk', flat=True))
            rows = super().update(**kwargs)
            for pk in pks:
                dispatch_audit_event(
                    actor_id, AuditEventTypeChoices.UPDATE, self.model, pk,
                    kwargs, using=self.db
                )
        return rows

    def update_or_create(self, defaults=None, audit_actor=None, **kwargs):
        """
        Upsert. Recorded as an UPDATE carrying the submitted defaults,
        whether the row was inserted or updated.
        """
        actor_id = require_actor(self.model, 'upsert', audit_actor)
        defaults = defaults or {}
        with transaction.atomic(using=self.db):
            obj = self.select_for_update().filter(**kwargs).first()
            created = obj is None
            if created:
                try:
                    with transaction.atomic(using=self.db):
                        obj = self.model(**kwargs, **defaults)
                        models.Model.save(obj, force_insert=True, using=self.db)
                except IntegrityError:
                    # A concurrent upsert inserted the row after our lookup
                    obj = self.select_for_update().get(**kwargs)
                    created = False
            if not created:
                for name, value in defaults.items():
                    setattr(obj, name, value)
                models.Model.save(obj, using=self.db)
            dispatch_audit_event(
                actor_id, AuditEventTypeChoices.UPDATE, self.model, obj.pk,
                defaults, using=self.db
            )
        return obj, created

    # -- deletes -----------------------------------------------------------

    def unlinked(self):
        """
        Narrow to rows whose guard relation is empty and mark the
        queryset as safe for bulk deletion.
        """
        relation = self.model.delete_guard_relation
        if relation is None:
            raise DeletionForbidden()
        clone = self.filter(**{f'{relation}__isnull': True})
        clone._excludes_linked_records = True
        return clone

    def delete(self):
        entity_type = self.model._meta.object_name
        if self.model.delete_guard_relation is None:
            metrics.gatekeeper_blocked_total.labels(entity_type=entity_type, reason='delete_forbidden').inc()
            log_gatekeeper_blocked(entity_type, 'bulk_delete', 'delete_forbidden')
            raise DeletionForbidden()
        if not self._excludes_linked_records:
            metrics.gatekeeper_blocked_total.labels(entity_type=entity_type, reason='unsafe_bulk_delete').inc()
            log_gatekeeper_blocked(entity_type, 'bulk_delete', 'unsafe_bulk_delete')
            raise UnsafeBulkDelete()
        try:
            return self._delete_unlinked()
        except IntegrityError:
            metrics.gatekeeper_blocked_total.labels(entity_type=entity_type, reason='linked_record').inc()
            log_gatekeeper_blocked(entity_type, 'bulk_delete', 'linked_record')
            raise self.model.linked_delete_error()

    delete.alters_data = True
    delete.queryset_only = True

    def _delete_unlinked(self):
        """
        Lock the candidate rows, then one conditional DELETE with the guard
        predicate in its WHERE clause.

        The lock waits out a booking that is linking one of the rows; the
        DELETE then re-reads the guard relation and skips it. The Collector
        is bypassed (it would delete by id in a later statement), so guarded
        models must have no cascading relations.
        """
        using = self._db or router.db_for_write(self.model)
        with transaction.atomic(using=using):
            list(self.using(using).select_for_update(of=('self',)).values_list('pk', flat=True))
            deleted = self._raw_delete(using)
        return deleted, ({self.model._meta.label: deleted} if deleted else {})

    _delete_unlinked.alters_data = True


class AuditedManager(models.Manager.from_queryset(AuditedQuerySet)):
    pass


class AuditedModel(models.Model):
    """
    Abstract base for every model whose mutations must be attributed.

    Subclasses may set ``delete_guard_relation`` to the name of a reverse
    relation; rows are then deletable only while it is empty, and
    ``linked_delete_error`` is raised otherwise.
    """

    delete_guard_relation = None
    linked_delete_error = ProtectedRecordDeletion

    objects = AuditedManager()

    class Meta:
        abstract = True

    def save(self, *args, audit_actor=None, **kwargs):
        creating = self._state.adding
        actor_id = require_actor(type(self), 'create' if creating else 'update', audit_actor)
        super().save(*args, **kwargs)
        if creating:
            event_type = AuditEventTypeChoices.CREATE
            changes = snapshot(self)
        else:
            event_type = AuditEventTypeChoices.UPDATE
            update_fields = kwargs.get('update_fields')
            changes = snapshot(self, set(update_fields) if update_fields is not None else None)
            changes.pop(self._meta.pk.attname, None)
        dispatch_audit_event(
            actor_id, event_type, type(self), self.pk, changes,
            using=kwargs.get('using') or router.db_for_write(type(self), instance=self)
        )

    def delete(self, using=None, keep_parents=False):
        """
        Guarded single-row delete.

        The "no linked record" check and the delete are one statement, so a
        row linked concurrently is never removed; a link that lands while
        the statement runs is reported as linked_delete_error.
        """
        model = type(self)
        entity_type = model._meta.object_name
        relation = model.delete_guard_relation
        if relation is None:
            metrics.gatekeeper_blocked_total.labels(entity_type=entity_type, reason='delete_forbidden').inc()
            log_gatekeeper_blocked(entity_type, 'delete', 'delete_forbidden', self.pk)
            raise DeletionForbidden()

        using = using or router.db_for_write(model, instance=self)
        guarded = model._default_manager.using(using).filter(pk=self.pk).unlinked()
        try:
            deleted, per_model = guarded._delete_unlinked()
        except IntegrityError:
            deleted = 0
        if deleted:
            self._state.adding = True
            return deleted, per_model

        if model._default_manager.using(using).filter(pk=self.pk).exists():
            metrics.gatekeeper_blocked_total.labels(entity_type=entity_type, reason='linked_record').inc()
            log_gatekeeper_blocked(entity_type, 'delete', 'linked_record', self.pk)
            raise model.linked_delete_error()
        raise model.DoesNotExist(f'{entity_type} {self.pk} does not exist')

    delete.alters_data = True
