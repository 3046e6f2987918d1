import logging
import click
from flask import Flask, jsonify
from flask.cli import with_appcontext
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError
from .extensions import db, migrate
from .config import Config
from .errors import BookingError, ValidationError
from .http import jerror
from .blueprints.reservations import bp as reservations_bp
from .blueprints.orders import bp as orders_bp
from .blueprints.admin import bp as admin_bp
from .models import Reservation, ReservationTable, TakeawayOrder
from . import store

logger = logging.getLogger(__name__)

def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    CORS(app)

    db.init_app(app)
    migrate.init_app(app, db)

    app.register_blueprint(reservations_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(admin_bp, url_prefix="/api/admin")

    @app.errorhandler(BookingError)
    def booking_error(e: BookingError):
        details = e.details
        if isinstance(e, ValidationError) and e.field and details is None:
            details = [{"field": e.field, "message": e.message}]
        return jerror(e.status, e.code, e.message, details)

    @app.errorhandler(SQLAlchemyError)
    def store_error(e: SQLAlchemyError):
        db.session.rollback()
        logger.exception("Store read failed")
        return jerror(500, "STORE_ERROR", "Storage is unavailable. Try again.")

    @app.get("/health")
    def health():
        return jsonify(status="ok")

    @click.command("seed")
    @click.option("--tables", "count", type=int, default=None, help="Number of tables to provision.")
    @click.option("--reset", is_flag=True, help="Also delete every reservation and takeaway order.")
    @with_appcontext
    def seed_command(count, reset):
        """Provisions the table catalog."""
        if reset:
            db.session.query(ReservationTable).delete()
            db.session.query(Reservation).delete()
            db.session.query(TakeawayOrder).delete()
            db.session.commit()
            click.echo("Cleared existing reservations and orders.")

        added = store.provision_tables(count or app.config["TOTAL_TABLES"])
        logger.info("Provisioned %d tables", added)
        click.echo(f"Created {added} tables.")

    app.cli.add_command(seed_command)

    return app
