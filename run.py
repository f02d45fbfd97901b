from __future__ import annotations
import os
from salon_api import create_app

def main() -> None:
    flask_app = create_app()

    # show what routes are actually mounted
    if flask_app.config.get("ENV_NAME") != "production":
        flask_app.logger.info("URL map:\n%s", "\n".join(
            str(rule) for rule in sorted(flask_app.url_map.iter_rules(), key=lambda x: x.rule)
        ))

    debug_enabled = os.environ.get("FLASK_DEBUG", "0") in {"1", "true", "True"}
    flask_app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 3000)), debug=debug_enabled)

if __name__ == "__main__":
    main()
