# petition_site/notifications/messages.py

from html import escape

from petition_site.constants import Language

FOOTER = "FB COMMUNITY - Fulham Bilingual"


def _layout(title, sections, extra=""):
    body = "".join(f'<div style="margin-bottom: 20px;">{section}</div>' for section in sections)
    return (
        '<div style="font-family: sans-serif; max-width: 600px; margin: 0 auto; color: #333; line-height: 1.6;">'
        f'<h2 style="color: #d52b27; text-align: center;">{title}</h2>'
        f'{body}{extra}'
        '<hr style="border: none; border-top: 1px solid #eee; margin: 30px 0;" />'
        f'<p style="font-size: 12px; color: #bbb; text-align: center; text-transform: uppercase;">{FOOTER}</p>'
        '</div>'
    )


def _ordered(language, french, english):
    # The signer's own language comes first.
    if Language(language) is Language.EN:
        return [english, french]
    return [french, english]


def edit_code_message(full_name, code, ttl_minutes, language=Language.FR):
    name = escape(full_name)
    french = (f"<p>Bonjour {name},</p>"
              "<p>Voici votre code d’accès pour modifier votre signature ou vos préférences sur la pétition :</p>")
    english = (f"<p>Hello {name},</p>"
               "<p>Here is your access code to edit your signature or preferences for the petition:</p>")
    code_block = (
        '<div style="background: #f4f4f4; padding: 30px; text-align: center; border-radius: 15px;">'
        f'<span style="font-size: 36px; font-weight: bold; letter-spacing: 8px;">{escape(code)}</span></div>'
        f'<p style="font-size: 13px; color: #999; text-align: center;">Ce code est valable {ttl_minutes} minutes. '
        f'/ This code is valid for {ttl_minutes} minutes.</p>'
    )
    subject = "Code d'accès / Access Code - Fulham Bilingual"
    return subject, _layout("Code d'accès / Access Code", _ordered(language, french, english), code_block)


def thank_you_message(full_name, language=Language.FR):
    name = escape(full_name)
    french = (f"<p>Bonjour {name},</p>"
              "<p>Merci d'avoir signé la pétition pour sauver le Fulham Bilingual. "
              "Votre voix compte énormément pour notre communauté. "
              "Nous vous tiendrons informé des prochaines étapes.</p>")
    english = (f"<p>Hello {name},</p>"
               "<p>Thank you for signing the petition to save the Fulham Bilingual. "
               "Your voice matters immensely to our community. "
               "We will keep you informed about the next steps.</p>")
    subject = "Merci / Thank you - Save the Fulham Bilingual"
    return subject, _layout("Merci / Thank You!", _ordered(language, french, english))
