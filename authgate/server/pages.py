from jinja2 import Environment

_env = Environment(autoescape=True)

INDEX_TEMPLATE = _env.from_string("""
<html>
<head><meta charset="utf-8"><title>authgate</title></head>
<body style="font-family:sans-serif;max-width:800px;margin:20px auto">
  <h2>Notes</h2>
  <form method="post" action="/notes">
    <input type="hidden" name="{{field}}" value="{{token}}" />
    <input name="text" maxlength="500" style="width:70%" />
    <button>Add</button>
  </form>

  <ul>
    {% for n in notes %}
    <li>{{n.created_h}} {{n.text}}</li>
    {% endfor %}
  </ul>

  <p style="color:#888">Scripts send the <code>{{header}}</code> header copied from the <code>{{cookie}}</code> cookie.</p>
</body>
</html>
""")
