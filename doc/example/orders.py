import remotecall
import time


# The replying side: an order desk that lets anyone look up an order, but
# only the billing service cancel one.

registry = remotecall.TargetRegistry()
orders = registry.target('Orders', allow={'run': '*', 'cancel': ['billing']})

book = {10: 'open', 11: 'shipped'}


@orders.operation()
def run(params):
    return book.get(params.get('id'))


@orders.operation()
def cancel(params):
    order = params.get('id')

    if book.get(order) != 'open':
        return False

    book[order] = 'cancelled'
    return True


def main():

    configuration = remotecall.config.Configuration('orders', {
        'billing': {'key': 'billing and orders'},
        'storefront': {'key': 'storefront and orders'},
    })

    desk = remotecall.ServiceAccess(configuration, registry)
    server = desk.serve(port=8080)

    # The asking side, normally a separate process. storefront can look
    # orders up, but its attempt to cancel one is refused.

    storefront = remotecall.Asker(server.url, 'storefront', 'storefront and orders')
    billing = remotecall.Asker(server.url, 'billing', 'billing and orders')

    print(storefront.ask('Orders', {'id': 10}))
    print(storefront.ask('Orders::cancel', {'id': 10}))
    print(billing.ask('Orders::cancel', {'id': 10}))
    print(billing.ask('Orders::cancel', {'id': 10}))

    time.sleep(0.1)
    server.stop()


if __name__ == '__main__':
    main()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
