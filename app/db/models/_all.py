# Imported for its side effect: registers every model on Base.metadata
from app.db.models.society import Society, AllSociety
from app.db.models.member import Member
from app.db.models.championship import Championship
from app.db.models.event import Event
from app.db.models.championship_registration import ChampionshipRegistration
from app.db.models.event_registration import EventRegistration
from app.db.models.user import User
