# drinkctl

Controller software for a drink-mixing machine. It keeps recipes and
ingredients in an SQLite database, pours queued drink orders by sending
container addresses and amounts to the pump board over an SPI character
device, and runs a TCP admin service so recipes, ingredients and containers
can be managed from another machine.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Commands

### `drinkctl`

Starts the machine side. In order it:

1. runs the device preparation script (`./start.sh` by default) and prints
   its output; if the script cannot be started it prints
   `[-] Couldn't get spidevice. Exiting` and exits with status 1;
2. opens the database and creates the `Drinks`, `Ingredienser` and
   `Bestillinger` tables if they are missing;
3. opens the SPI device;
4. starts the order worker and serves admin clients until interrupted.

Options:

- `--start-script PATH` – script to run first (default `./start.sh`)
- `--no-start-script` – skip the script
- `--database PATH` – SQLite file (default `/home/root/drinksdatabase.db`)
- `--device PATH` – SPI device (default `/dev/spidev`)
- `--host HOST`, `--port PORT` – where to listen (default all addresses,
  port 7913)
- `--log-dir DIR` – write the log to a file named after today's date
  (`DDMMYYYY`) in that directory; without it the log goes to standard error

### `drinkctl-admin`

Connects to a running machine and prints the stock of every ingredient as
`NAME:` / `AMT:` lines. Options: `--host` (default `10.9.8.2`), `--port`
(default 7913), `--timeout` in seconds (default 10). Exits with status 1 if
the stock cannot be read.

## Library overview

- `drinkctl.drink` – `Drink` and `DrinkContent`. A drink has a name, an
  image path and exactly five ingredient slots; unused slots are named
  `NOT_DECLARED`. `Drink.to_fields()` and `Drink.from_fields()` convert to
  and from the twelve-field list used on the wire and in the database.
- `drinkctl.database` – `Database`, the recipe store: drinks, ingredients
  with their container addresses, and the order history
  (`save_order`). Every operation is guarded by a lock so it can be shared
  between threads. Failures raise `DatabaseError`, whose `code` is an
  `ErrorCode`; `error_text(code)` gives the name reported to clients.
  `Kind.DRINK` and `Kind.INGREDIENT` select the table for `check_name` and
  `remove`.
- `drinkctl.protocol` – the wire format shared by server and client:
  colon-terminated fields led by a numeric `Command`. `parse_command`,
  `decode_fields`, `encode_fields`, `parse_pairs` and `encode_pairs` read
  and write messages.
- `drinkctl.device` – `SpiDevice`, which writes and reads 8-byte,
  NUL-padded text frames.
- `drinkctl.admin` – `Admin`, which carries out admin requests against the
  database and the device. `Admin.handle(message)` returns the reply text,
  or `None` for requests that have no reply (create ingredient, change
  drink); unknown commands get `UNKNOWN_COMMAND`.
- `drinkctl.server` – `Server`, a threaded TCP server that passes each
  received message to a handler and writes back its reply. A message of
  `EXIT` closes the connection.
- `drinkctl.orders` – `OrderAdmin`, a background worker. `order_drinks`
  queues an order once the controller confirms it; the worker looks up each
  drink's container addresses and amounts, sends them to the device and
  records the order.
- `drinkctl.client` – `Client`, which opens a new TCP connection for every
  message and reads the reply on it.
- `drinkctl.admin_client` – `AdminClient`, one method for each admin
  request.
- `drinkctl.log` – `Logger`, timestamped log lines; `get_logger` and
  `set_logger` manage the shared instance, `get_time` formats the stamps.
- `drinkctl.controller` – `Controller`, a console user interface that
  prints messages and always confirms orders.

## Example

```python
from drinkctl.admin_client import AdminClient
from drinkctl.client import Client

with Client("localhost", 7913, timeout=10) as client:
    admin = AdminClient(client)
    for name, amount in admin.check_stock().items():
        print(name, amount)
```

## What it does not do

- There is no way to place an order from outside the running process:
  the admin service has no order request, and `drinkctl` queues none by
  itself. Orders go in through `OrderAdmin.order_drinks` in code.
- The admin service does not answer the `GET_ERROR` request, so
  `AdminClient.error_text` receives `UNKNOWN_COMMAND`.
- There is no graphical interface; `Controller` only writes to the
  console.