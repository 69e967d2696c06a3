# petition_site/commands.py

import click
from flask import current_app

from petition_site import app
from petition_site.maintenance import normalize_relationship_labels, translate_missing_testimonials


@app.cli.command('translate-missing')
def translate_missing_command():
    """Translate testimonials left untranslated by a provider outage."""
    services = current_app.extensions['petition']
    fixed = translate_missing_testimonials(services.repository, services.translations)
    click.echo(f"Translated {fixed} testimonial(s).")


@app.cli.command('fix-relationships')
def fix_relationships_command():
    """Normalize legacy relationship labels on stored persons."""
    services = current_app.extensions['petition']
    updated = normalize_relationship_labels(services.repository)
    click.echo(f"Updated {updated} person(s).")
