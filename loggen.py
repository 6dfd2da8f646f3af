import argparse
import datetime
import random


TIME_FORMAT = "%d-%b-%Y %H:%M:%S UTC"

SCRIPTS = ["/var/www/html/index.php", "/var/www/html/cart.php", "/var/www/html/lib/db.php",
           "/var/www/html/lib/session.php", "/var/www/html/api/orders.php"]

VARIABLES = ["$user", "$order", "$total", "$cart", "$session"]


def _stamp(ts):
    return "[" + ts.strftime(TIME_FORMAT) + "]"


def generate_error_log(filename="php_errors.log", target_records=1000, seed=None):
    """
    Write a PHP-style error log and return the number of header lines written.

    Records mix warnings, notices, fatal errors with stack traces,
    xdebug style traces and WordPress database errors.
    """
    rng = random.Random(seed)
    current_time = datetime.datetime(2026, 1, 3, 13, 55, 1)
    headers = 0

    with open(filename, "w") as f:
        for i in range(target_records):
            current_time += datetime.timedelta(seconds=rng.randint(2, 45))
            ts = _stamp(current_time)
            script = rng.choice(SCRIPTS)
            line_no = rng.randint(1, 400)

            kind = rng.choice(["warning", "notice", "fatal", "xdebug", "wordpress"])

            if kind == "warning":
                f.write(f"{ts} PHP Warning:  Undefined variable {rng.choice(VARIABLES)} in {script} on line {line_no}\n")
            elif kind == "notice":
                f.write(f"{ts} PHP Notice:  Undefined index: id in {script} on line {line_no}\n")
            elif kind == "fatal":
                f.write(f"{ts} PHP Fatal error:  Uncaught Exception: connection refused in {script}:{line_no}\n")
                f.write("Stack trace:\n")
                f.write(f"#0 {script}({line_no}): connect()\n")
                f.write("#1 {main}\n")
                f.write(f"  thrown in {script} on line {line_no}\n")
            elif kind == "xdebug":
                f.write(f"{ts} PHP Fatal error:  Allowed memory size exhausted in {script} on line {line_no}\n")
                f.write(f"{ts} PHP Stack trace:\n")
                f.write(f"{ts} PHP   1. {{main}}() {script}:0\n")
                f.write(f"{ts} PHP   2. render() {script}:{line_no}\n")
            else:
                f.write(f"{ts} WordPress database error Table 'wp_{rng.randint(1, 5)}' doesn't exist\n")

            headers += 1

    return headers


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate a sample PHP error log")
    parser.add_argument("--output", default="php_errors.log")
    parser.add_argument("--records", type=int, default=1000)
    parser.add_argument("--seed", type=int)
    args = parser.parse_args()

    written = generate_error_log(args.output, args.records, args.seed)
    print(f"Generated {written} records in {args.output}")
