"""
Centralized prompts: the classifier instruction and every fixed voice line.

Salon-specific values are injected from configuration, not hardcoded.
Voice lines are short and spoken in Québec French; they are read by the
TTS engine, so no formatting, symbols or emojis.
"""

from phone_booking.config import settings

_biz = settings.business

SERVICE_CLASSIFIER_PROMPT = """Tu classes la demande d'un client d'un salon de coiffure.
Réponds par un seul mot, sans ponctuation :
- homme : coupe pour homme
- femme : coupe pour femme
- nonbinaire : coupe non binaire ou neutre
- none : aucun de ces services ou impossible à dire
"""

GREETING = f"Bonjour, bienvenue au {_biz.name} à {_biz.city}."

MENU_SUMMARY = (
    "Tu peux dire rendez-vous pour réserver, ou demander nos prix, "
    "notre adresse ou nos heures d'ouverture."
)

MENU_FOLLOW_UP = "Autre chose? Dis rendez-vous pour réserver, ou pose une autre question."

PRICE_INFO = f"Nos prix : {_biz.price_list}."
ADDRESS_INFO = f"Nous sommes au {_biz.address}."
HOURS_INFO = f"Nos heures d'ouverture : {_biz.hours}."

ASK_SERVICE = "Quel service veux-tu : coupe homme, coupe femme ou coupe non binaire?"
SERVICE_NOT_UNDERSTOOD = (
    "Désolée, je n'ai pas compris le service. Dis homme, femme ou non binaire."
)
SERVICE_NOT_CONFIGURED = (
    "Ce service n'est pas encore réservable par téléphone. "
    "Je te transfère à un membre de l'équipe."
)
NO_SLOTS_AVAILABLE = (
    "Désolée, il n'y a aucune disponibilité cette semaine pour ce service. "
    "Tu peux rappeler plus tard, ou dire agent pour parler à quelqu'un."
)

SLOT_NOT_UNDERSTOOD = "Appuie sur 1, 2 ou 3 pour choisir ton heure."

ASK_NAME = "Parfait. Quel est ton prénom et ton nom de famille?"
NAME_NOT_UNDERSTOOD = "Désolée, j'ai besoin de ton prénom et de ton nom. Peux-tu répéter?"

ASK_PHONE = (
    "À quel numéro de cellulaire veux-tu recevoir la confirmation par texto? "
    "Dis les dix chiffres."
)
PHONE_NOT_UNDERSTOOD = "Je n'ai pas saisi un numéro valide. Répète les dix chiffres, s'il te plaît."

CLOSING = (
    "Parfait! Je t'envoie un texto pour que tu confirmes ton courriel. "
    "Une fois fait, tu recevras ta confirmation. Bonne journée!"
)

TRANSFER = "Je te transfère à un membre de l'équipe. Un instant s'il te plaît."
TRANSFER_UNAVAILABLE = (
    "Désolée, personne n'est disponible pour le moment. "
    "Rappelle-nous pendant nos heures d'ouverture. Au revoir!"
)
TECHNICAL_PROBLEM = "Désolée, j'ai un petit problème technique."
