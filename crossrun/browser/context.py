"""Context page served to every browser.

The page installs ``window.__bridge__`` and console/error hooks, then
loads the served files. Every event is posted to the host with a
synchronous request so the host sees events in emission order:

    POST /bridge/<browser-id>
    {"type": "start" | "log" | "error" | "info" | "result" | "complete",
     "level": "log" | "warn" | ... | null,
     "payload": ...}

String log and error payloads are wrapped in single quotes, which the
host-side reporter strips again.
"""

import html
from typing import Iterable

BRIDGE_CLIENT = """\
(function () {
  var id = new URLSearchParams(window.location.search).get('id');

  function send(type, payload, level) {
    var xhr = new XMLHttpRequest();
    xhr.open('POST', '/bridge/' + encodeURIComponent(id), false);
    xhr.setRequestHeader('Content-Type', 'application/json');
    try {
      xhr.send(JSON.stringify({
        type: type,
        level: level || null,
        payload: payload === undefined ? null : payload
      }));
    } catch (e) {
      // host is gone; nothing left to report to
    }
  }

  function quote(text) {
    return "'" + text + "'";
  }

  function serialize(args) {
    var parts = [];
    for (var i = 0; i < args.length; i++) {
      var arg = args[i];
      if (typeof arg === 'string') {
        parts.push(arg);
      } else {
        try {
          parts.push(JSON.stringify(arg));
        } catch (e) {
          parts.push(String(arg));
        }
      }
    }
    return quote(parts.join(' '));
  }

  ['log', 'info', 'warn', 'error', 'debug'].forEach(function (level) {
    var original = console[level];
    console[level] = function () {
      send('log', serialize(arguments), level);
      if (original) original.apply(console, arguments);
    };
  });

  window.addEventListener('error', function (event) {
    var error = event.error;
    var message = error && error.stack ? error.stack :
      event.message + '\\n  at ' + event.filename + ':' + event.lineno;
    send('error', quote(message));
  });

  window.addEventListener('unhandledrejection', function (event) {
    var reason = event.reason;
    send('error', quote('Unhandled rejection: ' +
      (reason && reason.stack ? reason.stack : String(reason))));
  });

  window.__bridge__ = {
    start: function () {},
    info: function (data) { send('info', data); },
    result: function (data) { send('result', data); },
    complete: function (data) { send('complete', data || {}); },
    error: function (message) { send('error', quote(String(message))); }
  };

  send('start', { userAgent: navigator.userAgent });
})();
"""

PAGE_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>crossrun</title>
<script>
{client}
</script>
</head>
<body>
{scripts}
<script>window.__bridge__.start();</script>
</body>
</html>
"""


def render_context_page(script_urls: Iterable[str]) -> str:
    """Render the context page loading ``script_urls`` in order."""
    scripts = "\n".join(
        f'<script src="{html.escape(url, quote=True)}"></script>' for url in script_urls
    )
    return PAGE_TEMPLATE.format(client=BRIDGE_CLIENT, scripts=scripts)
