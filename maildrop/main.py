"""maildrop - stores the attachments of relayed inbound emails in S3."""

from robyn import Robyn

from maildrop.api.health import router as health_router
from maildrop.api.inbound import router as inbound_router
from maildrop.core.lifespan import create_lifespan
from maildrop.core.logger import LogIcon, logger
from maildrop.core.settings import settings as st
from maildrop.events.storage import StorageEvent

app = Robyn(__file__)

# Lifespan events
lifespan = create_lifespan(app)
lifespan.register(StorageEvent)

app.startup_handler(lifespan.startup)
app.shutdown_handler(lifespan.shutdown)

# Routers
app.include_router(health_router)
app.include_router(inbound_router)


def main() -> None:
    logger.info(
        f"Starting {st.API_NAME}",
        icon=LogIcon.START,
        host=st.API_HOST,
        port=st.API_PORT,
        inbound=st.INBOUND_PATH,
    )
    app.start(host=st.API_HOST, port=st.API_PORT)


if __name__ == "__main__":
    main()
