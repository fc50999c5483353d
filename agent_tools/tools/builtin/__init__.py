"""Auto-import builtin executor modules to trigger @register_executor decorators."""
from . import subscription
from . import team
from . import knowledge
from . import calendar
from . import crm
from . import ledger
from . import memory
from . import delegate
from . import notify
from . import social
