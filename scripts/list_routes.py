import app

for rule in sorted(app.app.url_map.iter_rules(), key=lambda r: r.rule):
    if rule.rule.startswith("/api/"):
        methods = ",".join(sorted(m for m in rule.methods if m not in ("HEAD", "OPTIONS")))
        print(f"{methods:12} {rule.rule} -> {rule.endpoint}")
