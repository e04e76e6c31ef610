from .users import User, AuthToken
from .videos import Video
from .jobs import Job
from .clips import Clip
from .captions import Caption
