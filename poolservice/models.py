import uuid
from datetime import datetime, timezone

from poolservice import db


def new_id():
    return str(uuid.uuid4())


def utcnow():
    # stored naive, always UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampMixin:
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class Customer(TimestampMixin, db.Model):
    __tablename__ = 'customer'
    id         = db.Column(db.String(36), primary_key=True, default=new_id)
    name       = db.Column(db.String(200), nullable=False)
    phone      = db.Column(db.String(20), nullable=False, index=True)
    email      = db.Column(db.String(254))
    source     = db.Column(db.String(100))
    deleted_at = db.Column(db.DateTime)

    properties = db.relationship(
        'Property',
        backref='customer',
        lazy=True,
        cascade='all, delete-orphan'
    )
    estimates = db.relationship(
        'Estimate',
        backref='customer',
        lazy=True,
        cascade='all, delete-orphan'
    )
    notes = db.relationship(
        'Note',
        backref='customer',
        lazy=True,
        cascade='all, delete-orphan',
        order_by='Note.created_at.desc()'
    )
    communications = db.relationship(
        'Communication',
        backref='customer',
        lazy=True,
        cascade='all, delete-orphan',
        order_by='Communication.occurred_at.desc()'
    )
    tags = db.relationship(
        'CustomerTag',
        secondary='customer_tag_link',
        backref='customers',
        lazy=True,
        order_by='CustomerTag.name'
    )

    @property
    def is_deleted(self):
        return self.deleted_at is not None


class Property(TimestampMixin, db.Model):
    __tablename__ = 'property'
    id            = db.Column(db.String(36), primary_key=True, default=new_id)
    customer_id   = db.Column(db.String(36), db.ForeignKey('customer.id'), nullable=False)
    address_line1 = db.Column(db.String(200), nullable=False)
    address_line2 = db.Column(db.String(100))
    city          = db.Column(db.String(100), nullable=False)
    state         = db.Column(db.String(2), nullable=False)
    zip_code      = db.Column(db.String(10), nullable=False)
    gate_code     = db.Column(db.String(20))
    access_notes  = db.Column(db.String(500))

    pools = db.relationship(
        'Pool',
        backref='property',
        lazy=True,
        cascade='all, delete-orphan'
    )


class Pool(TimestampMixin, db.Model):
    __tablename__ = 'pool'
    id               = db.Column(db.String(36), primary_key=True, default=new_id)
    property_id      = db.Column(db.String(36), db.ForeignKey('property.id'), nullable=False)
    type             = db.Column(db.String(20), nullable=False)
    surface_type     = db.Column(db.String(20))
    length_ft        = db.Column(db.Float)
    width_ft         = db.Column(db.Float)
    depth_shallow_ft = db.Column(db.Float)
    depth_deep_ft    = db.Column(db.Float)
    volume_gallons   = db.Column(db.Integer)
    equipment_notes  = db.Column(db.String(1000))


class Estimate(TimestampMixin, db.Model):
    __tablename__ = 'estimate'
    id               = db.Column(db.String(36), primary_key=True, default=new_id)
    estimate_number  = db.Column(db.String(20), unique=True, nullable=False)
    customer_id      = db.Column(db.String(36), db.ForeignKey('customer.id'), nullable=False)
    pool_id          = db.Column(db.String(36), db.ForeignKey('pool.id', ondelete='SET NULL'))
    status           = db.Column(db.String(32), nullable=False, default='draft')
    # [{id, description, quantity, unit_price_cents, total_cents}]
    line_items       = db.Column(db.JSON, nullable=False, default=list)
    tax_rate         = db.Column(db.Float, nullable=False, default=0.0)
    subtotal_cents   = db.Column(db.Integer, nullable=False, default=0)
    tax_amount_cents = db.Column(db.Integer, nullable=False, default=0)
    total_cents      = db.Column(db.Integer, nullable=False, default=0)
    notes            = db.Column(db.Text)
    valid_until      = db.Column(db.Date)

    pool = db.relationship('Pool')


class Note(TimestampMixin, db.Model):
    __tablename__ = 'note'
    id          = db.Column(db.String(36), primary_key=True, default=new_id)
    customer_id = db.Column(db.String(36), db.ForeignKey('customer.id'), nullable=False)
    content     = db.Column(db.Text, nullable=False)


class CalendarEvent(TimestampMixin, db.Model):
    __tablename__ = 'calendar_event'
    id             = db.Column(db.String(36), primary_key=True, default=new_id)
    customer_id    = db.Column(db.String(36), db.ForeignKey('customer.id'), nullable=False)
    property_id    = db.Column(db.String(36), db.ForeignKey('property.id', ondelete='SET NULL'))
    pool_id        = db.Column(db.String(36), db.ForeignKey('pool.id', ondelete='SET NULL'))
    title          = db.Column(db.String(200), nullable=False)
    description    = db.Column(db.String(2000))
    event_type     = db.Column(db.String(32), nullable=False)
    status         = db.Column(db.String(32), nullable=False, default='scheduled')
    start_datetime = db.Column(db.DateTime, nullable=False, index=True)
    end_datetime   = db.Column(db.DateTime, nullable=False)
    all_day        = db.Column(db.Boolean, nullable=False, default=False)
    location_url   = db.Column(db.String(500))
    version        = db.Column(db.Integer, nullable=False, default=1)

    customer = db.relationship('Customer')


class Communication(db.Model):
    __tablename__ = 'communication'
    id          = db.Column(db.String(36), primary_key=True, default=new_id)
    customer_id = db.Column(db.String(36), db.ForeignKey('customer.id'), nullable=False, index=True)
    type        = db.Column(db.String(10), nullable=False)
    direction   = db.Column(db.String(10), nullable=False)
    summary     = db.Column(db.Text, nullable=False)
    occurred_at = db.Column(db.DateTime, nullable=False, index=True)
    created_at  = db.Column(db.DateTime, nullable=False, default=utcnow)


customer_tag_links = db.Table(
    'customer_tag_link',
    db.Column('customer_id', db.String(36), db.ForeignKey('customer.id'), primary_key=True),
    db.Column('tag_id', db.String(36), db.ForeignKey('customer_tag.id'), primary_key=True),
)


class CustomerTag(db.Model):
    __tablename__ = 'customer_tag'
    id         = db.Column(db.String(36), primary_key=True, default=new_id)
    name       = db.Column(db.String(50), unique=True, nullable=False)
    color      = db.Column(db.String(7), nullable=False, default='#3182ce')
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
